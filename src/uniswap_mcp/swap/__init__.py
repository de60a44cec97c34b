"""Swap execution module.

Provides:
- SwapOrchestrator: wrap / approve / swap pipeline for ETH -> USDC
- SwapResult / StepOutcome: per-call results
"""

from uniswap_mcp.swap.orchestrator import (
    ExactInputSingleParams,
    StepOutcome,
    SwapOrchestrator,
    SwapResult,
)

__all__ = [
    "ExactInputSingleParams",
    "StepOutcome",
    "SwapOrchestrator",
    "SwapResult",
]
