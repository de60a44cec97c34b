"""Utility modules for uniswap-mcp."""

from uniswap_mcp.utils.locks import AccountLock, LockTimeoutError, get_account_lock

__all__ = ["AccountLock", "LockTimeoutError", "get_account_lock"]
