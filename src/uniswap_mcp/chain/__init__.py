"""Chain access: web3 client and signing account."""

from uniswap_mcp.chain.account import derive_private_key, load_account
from uniswap_mcp.chain.client import ChainClient

__all__ = [
    "ChainClient",
    "derive_private_key",
    "load_account",
]
