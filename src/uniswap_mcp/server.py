"""MCP tool server.

Two tools, each returning plain text:
- get_eth_balance:   ETH balance of an address
- swap_eth_for_usdc: wrap, approve and swap ETH for USDC on Uniswap V3

Failures are reported inside the text result; a tool call never raises
to the MCP layer, so callers always parse the text.
"""

import logging
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from uniswap_mcp import __version__
from uniswap_mcp.chain.client import ChainClient
from uniswap_mcp.config import Settings
from uniswap_mcp.services.balance import BalanceResult, BalanceService
from uniswap_mcp.swap.orchestrator import SwapOrchestrator, SwapResult

logger = logging.getLogger(__name__)

SERVER_NAME = "uniswap-local-fork"


def format_balance(result: BalanceResult) -> str:
    if result.success:
        return f"Balance for {result.address}: {result.balance} ETH"
    return f"Failed to retrieve balance for address: {result.address}. Error: {result.error.message}"


def format_swap(result: SwapResult) -> str:
    if result.success:
        return (
            f"Successfully swapped {result.amount_in} ETH for {result.amount_out} USDC. "
            f"Transaction hash: {result.tx_hash}"
        )
    return f"Failed to swap ETH for USDC. Error: {result.error.message}"


async def get_eth_balance(service: BalanceService, address: str) -> str:
    """Balance tool body."""
    logger.info(f"get_eth_balance called with: address={address!r}")
    try:
        result = await service.get_eth_balance(address)
    except Exception as e:
        logger.exception("Unexpected error in get_eth_balance")
        return f"Failed to retrieve balance for address: {address}. Error: {e}"
    return format_balance(result)


async def swap_eth_for_usdc(orchestrator: SwapOrchestrator, recipient: str, amount_in: str) -> str:
    """Swap tool body."""
    logger.info(f"swap_eth_for_usdc called with: recipient={recipient!r}, amount_in={amount_in!r}")
    try:
        result = await orchestrator.swap_eth_for_usdc(recipient, amount_in)
    except Exception as e:
        logger.exception("Unexpected error in swap_eth_for_usdc")
        return f"Failed to swap ETH for USDC. Error: {e}"
    return format_swap(result)


def register(mcp: FastMCP, balances: BalanceService, orchestrator: SwapOrchestrator) -> None:
    """Attach both tools to ``mcp``, bound to the given services."""

    @mcp.tool(
        name="get_eth_balance",
        description="Get ETH balance for an address on the local Ethereum fork",
    )
    async def _get_eth_balance(
        address: Annotated[str, Field(description="Ethereum address to check balance for")],
    ) -> str:
        return await get_eth_balance(balances, address)

    @mcp.tool(
        name="swap_eth_for_usdc",
        description="Swap ETH for USDC using UniV3 on the local fork",
    )
    async def _swap_eth_for_usdc(
        recipient: Annotated[str, Field(description="Address to receive USDC")],
        amount_in: Annotated[str, Field(description="Amount of ETH to swap, e.g. \"1.5\"")],
    ) -> str:
        return await swap_eth_for_usdc(orchestrator, recipient, amount_in)


def build_server(settings: Settings, client: ChainClient) -> FastMCP:
    """Create the MCP server with services wired to ``client``."""
    mcp = FastMCP(SERVER_NAME)
    # FastMCP has no version argument; without this the SDK's own version is advertised
    mcp._mcp_server.version = __version__
    register(
        mcp,
        BalanceService(client),
        SwapOrchestrator(client, lock_timeout=settings.swap_lock_timeout),
    )
    return mcp
