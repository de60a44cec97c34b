"""Native ETH balance lookup."""

import logging
from dataclasses import dataclass
from typing import Optional

from uniswap_mcp.chain.client import ChainClient
from uniswap_mcp.contracts import ETH_DECIMALS
from uniswap_mcp.errors import ChainError, classify
from uniswap_mcp.units import format_units

logger = logging.getLogger(__name__)


@dataclass
class BalanceResult:
    """Result of a balance lookup."""
    address: str
    success: bool
    balance_wei: Optional[int] = None
    error: Optional[ChainError] = None

    @property
    def balance(self) -> Optional[str]:
        """Balance as a decimal ETH string."""
        if self.balance_wei is None:
            return None
        return format_units(self.balance_wei, ETH_DECIMALS)


class BalanceService:
    """Reads native balances through a chain client."""

    def __init__(self, client: ChainClient):
        self.client = client

    async def get_eth_balance(self, address: str) -> BalanceResult:
        """Look up the ETH balance of an address. Never raises."""
        try:
            balance_wei = await self.client.get_balance(address)
        except Exception as e:
            error = classify(e)
            logger.warning(f"Balance lookup failed for {address} ({error.kind.value}): {error.message}")
            return BalanceResult(address=address, success=False, error=error)

        logger.info(f"Balance for {address}: {balance_wei} wei")
        return BalanceResult(address=address, success=True, balance_wei=balance_wei)
