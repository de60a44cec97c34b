"""Main entry point - runs the MCP server on the configured transport.

Logs go to stderr; on the stdio transport stdout carries the protocol.
"""

import asyncio
import logging
import sys

from mcp.server.fastmcp import FastMCP

from uniswap_mcp.chain.account import load_account
from uniswap_mcp.chain.client import ChainClient
from uniswap_mcp.config import TRANSPORTS, Settings, get_settings
from uniswap_mcp.server import build_server

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_server(settings: Settings) -> FastMCP:
    """Resolve the signing account, build the chain client and the server."""
    if settings.transport not in TRANSPORTS:
        raise ValueError(f"Unsupported transport: {settings.transport} (expected one of {TRANSPORTS})")

    account = load_account(settings)
    if account is None:
        logger.warning("PRIVATE_KEY / WALLET_SEED_PHRASE not set - swap tool disabled")

    client = ChainClient.from_settings(settings, account=account)
    return build_server(settings, client)


async def run(settings: Settings) -> None:
    mcp = create_server(settings)

    logger.info(f"Uniswap MCP Server running on {settings.transport}")
    if settings.transport == "stdio":
        await mcp.run_stdio_async()
    elif settings.transport == "sse":
        await mcp.run_sse_async()
    else:
        await mcp.run_streamable_http_async()


def main() -> None:
    """Main entry point."""
    try:
        settings = get_settings()
    except Exception as e:
        print(f"Fatal error loading settings: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings)
    logger.info("Starting uniswap-mcp...")
    logger.debug(f"Settings: {settings.get_safe_dict()}")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception:
        logger.exception("Fatal error in main()")
        sys.exit(1)


if __name__ == "__main__":
    main()
