"""Services built on the chain client."""

from uniswap_mcp.services.balance import BalanceResult, BalanceService

__all__ = [
    "BalanceResult",
    "BalanceService",
]
