"""ETH -> USDC swap on Uniswap V3, as an ordered pipeline of transactions.

Steps, each confirmed before the next is submitted:
1. wrap:    WETH.deposit() carrying the ETH amount as value
2. approve: WETH.approve(SwapRouter, amount)
3. swap:    SwapRouter.exactInputSingle(WETH -> USDC, fee 0.3%)

The recipient's USDC balance is read afterwards and reported.

A failed step stops the pipeline. Earlier confirmed steps are NOT undone:
if approve or swap fails, the ETH stays wrapped as WETH in the sending
account. No slippage protection is applied (amountOutMinimum = 0).
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from uniswap_mcp.chain.client import ChainClient
from uniswap_mcp.contracts import (
    AMOUNT_OUT_MINIMUM,
    DEADLINE_WINDOW,
    ERC20_BALANCE_ABI,
    ETH_DECIMALS,
    POOL_FEE,
    SQRT_PRICE_LIMIT_X96,
    SWAP_ROUTER_ABI,
    SWAP_ROUTER_ADDRESS,
    USDC_ADDRESS,
    USDC_DECIMALS,
    WETH_ABI,
    WETH_ADDRESS,
)
from uniswap_mcp.errors import ChainError, ErrorKind, classify
from uniswap_mcp.units import format_units, parse_units
from uniswap_mcp.utils.locks import AccountLock

logger = logging.getLogger(__name__)

STEP_WRAP = "wrap"
STEP_APPROVE = "approve"
STEP_SWAP = "swap"


@dataclass(frozen=True)
class ExactInputSingleParams:
    """SwapRouter.exactInputSingle argument struct."""
    token_in: str
    token_out: str
    fee: int
    recipient: str
    deadline: int
    amount_in: int
    amount_out_minimum: int
    sqrt_price_limit_x96: int

    def to_abi(self) -> dict:
        return {
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "fee": self.fee,
            "recipient": self.recipient,
            "deadline": self.deadline,
            "amountIn": self.amount_in,
            "amountOutMinimum": self.amount_out_minimum,
            "sqrtPriceLimitX96": self.sqrt_price_limit_x96,
        }


@dataclass(frozen=True)
class StepOutcome:
    """Result of one pipeline step."""
    name: str
    tx_hash: Optional[str] = None
    receipt: Optional[dict] = None
    error: Optional[ChainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SwapResult:
    """Result of a swap execution."""
    success: bool
    recipient: str
    amount_in: str
    amount_out: Optional[str] = None
    tx_hash: Optional[str] = None
    steps: list[StepOutcome] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[ChainError] = None

    @property
    def completed_steps(self) -> list[str]:
        return [step.name for step in self.steps if step.ok]


class SwapOrchestrator:
    """Runs the wrap / approve / swap sequence through a chain client."""

    def __init__(
        self,
        client: ChainClient,
        lock_timeout: Optional[float] = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.lock_timeout = lock_timeout
        self.clock = clock

    def build_swap_params(self, recipient: str, amount_in: int) -> ExactInputSingleParams:
        """Fresh swap parameters, deadline measured from now."""
        return ExactInputSingleParams(
            token_in=WETH_ADDRESS,
            token_out=USDC_ADDRESS,
            fee=POOL_FEE,
            recipient=recipient,
            deadline=int(self.clock()) + DEADLINE_WINDOW,
            amount_in=amount_in,
            amount_out_minimum=AMOUNT_OUT_MINIMUM,
            sqrt_price_limit_x96=SQRT_PRICE_LIMIT_X96,
        )

    async def swap_eth_for_usdc(self, recipient: str, amount_in: str) -> SwapResult:
        """Swap ``amount_in`` ETH for USDC delivered to ``recipient``. Never raises."""
        try:
            recipient = self.client.to_checksum(recipient)
            amount_wei = parse_units(amount_in, ETH_DECIMALS)
            sender = self.client.address
            if sender is None:
                raise ChainError(
                    ErrorKind.INPUT,
                    "No signing account configured (set PRIVATE_KEY or WALLET_SEED_PHRASE)",
                )
        except ChainError as e:
            logger.warning(f"Swap rejected ({e.kind.value}): {e.message}")
            return SwapResult(
                success=False,
                recipient=recipient,
                amount_in=amount_in,
                error=e,
            )

        logger.info(f"Swap {amount_in} ETH -> USDC for {recipient} from {sender}")

        try:
            async with AccountLock(sender, timeout=self.lock_timeout, operation="swap"):
                return await self._run_pipeline(recipient, amount_in, amount_wei)
        except ChainError as e:
            logger.warning(f"Swap not started ({e.kind.value}): {e.message}")
            return SwapResult(
                success=False,
                recipient=recipient,
                amount_in=amount_in,
                error=e,
            )

    def _steps(
        self, recipient: str, amount_wei: int
    ) -> list[tuple[str, Callable[[], Awaitable[str]]]]:
        client = self.client

        async def wrap() -> str:
            return await client.write_contract(
                WETH_ADDRESS, WETH_ABI, "deposit", value=amount_wei
            )

        async def approve() -> str:
            return await client.write_contract(
                WETH_ADDRESS, WETH_ABI, "approve", args=(SWAP_ROUTER_ADDRESS, amount_wei)
            )

        async def swap() -> str:
            # Built at submission time so the deadline is current
            params = self.build_swap_params(recipient, amount_wei)
            return await client.write_contract(
                SWAP_ROUTER_ADDRESS, SWAP_ROUTER_ABI, "exactInputSingle", args=(params.to_abi(),)
            )

        return [
            (STEP_WRAP, wrap),
            (STEP_APPROVE, approve),
            (STEP_SWAP, swap),
        ]

    async def _run_step(self, name: str, submit: Callable[[], Awaitable[str]]) -> StepOutcome:
        tx_hash = None
        try:
            tx_hash = await submit()
            receipt = await self.client.wait_for_receipt(tx_hash)
        except Exception as e:
            error = classify(e)
            logger.error(f"Swap step '{name}' failed ({error.kind.value}): {error.message}")
            return StepOutcome(name=name, tx_hash=tx_hash, error=error)

        logger.info(f"Swap step '{name}' confirmed: {tx_hash}")
        return StepOutcome(name=name, tx_hash=tx_hash, receipt=receipt)

    async def _run_pipeline(self, recipient: str, amount_in: str, amount_wei: int) -> SwapResult:
        outcomes: list[StepOutcome] = []

        for name, submit in self._steps(recipient, amount_wei):
            outcome = await self._run_step(name, submit)
            outcomes.append(outcome)

            if not outcome.ok:
                if any(step.name == STEP_WRAP and step.ok for step in outcomes):
                    logger.warning(
                        f"Swap aborted at '{name}': {amount_wei} wei remain wrapped as WETH "
                        f"in {self.client.address}"
                    )
                return SwapResult(
                    success=False,
                    recipient=recipient,
                    amount_in=amount_in,
                    steps=outcomes,
                    failed_step=name,
                    error=outcome.error,
                )

        swap_hash = outcomes[-1].tx_hash

        try:
            usdc_balance = await self.client.call(
                USDC_ADDRESS, ERC20_BALANCE_ABI, "balanceOf", recipient
            )
        except Exception as e:
            error = classify(e)
            logger.error(f"USDC balance read failed after swap {swap_hash}: {error.message}")
            return SwapResult(
                success=False,
                recipient=recipient,
                amount_in=amount_in,
                tx_hash=swap_hash,
                steps=outcomes,
                failed_step="balance",
                error=error,
            )

        amount_out = format_units(usdc_balance, USDC_DECIMALS)
        logger.info(f"Swap {swap_hash} complete: recipient holds {amount_out} USDC")
        return SwapResult(
            success=True,
            recipient=recipient,
            amount_in=amount_in,
            amount_out=amount_out,
            tx_hash=swap_hash,
            steps=outcomes,
        )
