"""Concurrency control for transactions sent from one account.

A swap is three dependent transactions (deposit, approve, swap). Two swaps
from the same account must not interleave, or the second approve would
overwrite the allowance the first swap is about to spend.
"""

import asyncio
import logging
from typing import Optional

from uniswap_mcp.errors import ChainError, ErrorKind

logger = logging.getLogger(__name__)

# Global lock registry: lowercase address -> asyncio.Lock
_account_locks: dict[str, asyncio.Lock] = {}
_registry_lock = asyncio.Lock()


class LockTimeoutError(ChainError):
    """Another swap from the same account held the lock past the wait limit."""

    def __init__(self, message: str):
        super().__init__(ErrorKind.TRANSPORT, message)


async def get_account_lock(address: str) -> asyncio.Lock:
    """Return the one asyncio.Lock shared by every swap sent from ``address``.

    Checksummed and lowercase spellings of an address map to the same lock.
    """
    key = address.lower()
    async with _registry_lock:
        if key not in _account_locks:
            _account_locks[key] = asyncio.Lock()
        return _account_locks[key]


class AccountLock:
    """Hold an account's nonce sequence for a multi-transaction operation.

    While held, no other swap from the same account can submit, so the
    deposit, approve and swap of one call take consecutive nonces and the
    allowance granted by its approve is the one its swap spends.

    Example:
        async with AccountLock(client.address, operation="swap"):
            await client.write_contract(...)
            await client.write_contract(...)
    """

    def __init__(
        self,
        address: str,
        timeout: Optional[float] = 30.0,
        operation: str = "transaction",
    ):
        self.address = address
        self.timeout = timeout
        self.operation = operation
        self._lock: Optional[asyncio.Lock] = None
        self._acquired = False

    async def __aenter__(self) -> "AccountLock":
        self._lock = await get_account_lock(self.address)

        try:
            if self.timeout:
                self._acquired = await asyncio.wait_for(
                    self._lock.acquire(),
                    timeout=self.timeout,
                )
            else:
                await self._lock.acquire()
                self._acquired = True

            logger.debug(f"{self.operation} holds the nonce sequence of {self.address}")
            return self

        except asyncio.TimeoutError:
            logger.warning(
                f"{self.operation} gave up waiting {self.timeout}s for {self.address}"
            )
            raise LockTimeoutError(
                f"Another transaction from {self.address} is still in progress "
                f"(waited {self.timeout}s)"
            )

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._acquired and self._lock:
            self._lock.release()
            self._acquired = False
            logger.debug(f"{self.operation} released the nonce sequence of {self.address}")
        return False


def clear_account_locks() -> None:
    """Drop every registered account lock; the next swap creates a fresh one."""
    _account_locks.clear()
