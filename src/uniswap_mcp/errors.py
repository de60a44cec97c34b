"""Error taxonomy for chain operations.

Every failure surfaced by the chain client is a ChainError tagged with one
of three kinds. Tool handlers turn them into text; nothing above the client
needs to know about web3 or requests exceptions.
"""

from decimal import InvalidOperation
from enum import Enum

import requests
from web3.exceptions import ContractLogicError, TimeExhausted, Web3RPCError


class ErrorKind(str, Enum):
    """What went wrong, independent of the message text."""

    INPUT = "input"          # malformed address / amount, missing signer
    TRANSPORT = "transport"  # endpoint unreachable, timeouts
    REVERT = "revert"        # rejected or reverted on chain


class ChainError(Exception):
    """A classified failure from the chain client."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ChainError({self.kind.value}, {self.message!r})"


class TransactionReverted(ChainError):
    """Raised when a mined transaction has status 0."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(ErrorKind.REVERT, f"Transaction {tx_hash} failed (reverted)")


def classify(exc: BaseException) -> ChainError:
    """Map an exception raised by web3 / requests to a ChainError."""
    if isinstance(exc, ChainError):
        return exc

    message = str(exc) or exc.__class__.__name__

    # ContractLogicError subclasses Web3RPCError, and both must win over ValueError
    if isinstance(exc, (ContractLogicError, Web3RPCError)):
        return ChainError(ErrorKind.REVERT, message)

    if isinstance(exc, (TimeExhausted, TimeoutError, requests.exceptions.RequestException, OSError)):
        return ChainError(ErrorKind.TRANSPORT, message)

    if isinstance(exc, (ValueError, TypeError, InvalidOperation)):
        return ChainError(ErrorKind.INPUT, message)

    return ChainError(ErrorKind.TRANSPORT, message)
