"""MCP server for ETH balance lookups and ETH -> USDC swaps on Uniswap V3."""

__version__ = "0.0.1"
