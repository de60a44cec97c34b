"""Pytest configuration and fixtures."""

import os
from typing import Any, Optional

import pytest

# Set test environment
os.environ["RPC_URL"] = "http://127.0.0.1:1"
os.environ["DEBUG"] = "true"
os.environ.pop("PRIVATE_KEY", None)
os.environ.pop("WALLET_SEED_PHRASE", None)

from uniswap_mcp.chain.client import ChainClient
from uniswap_mcp.config import get_settings
from uniswap_mcp.utils.locks import clear_account_locks

# Anvil / Hardhat default account #0
ANVIL_MNEMONIC = "test test test test test test test test test test test junk"
ANVIL_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ANVIL_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


class FakeChainClient:
    """In-memory stand-in for ChainClient that records every call.

    Transaction hashes are sequential: the n-th write gets 0x000..0n.
    """

    to_checksum = staticmethod(ChainClient.to_checksum)

    def __init__(
        self,
        address: Optional[str] = ANVIL_ADDRESS,
        eth_balance: int = 0,
        usdc_balance: int = 0,
    ):
        self.address = address
        self.eth_balance = eth_balance
        self.usdc_balance = usdc_balance

        # function name -> exception raised on submit / on confirmation
        self.submit_errors: dict[str, Exception] = {}
        self.receipt_errors: dict[str, Exception] = {}
        self.balance_error: Optional[Exception] = None
        self.call_error: Optional[Exception] = None

        self.writes: list[dict[str, Any]] = []
        self.calls: list[dict[str, Any]] = []
        self.events: list[tuple[str, str]] = []
        self._functions_by_hash: dict[str, str] = {}

    async def get_balance(self, address: str) -> int:
        self.to_checksum(address)
        if self.balance_error:
            raise self.balance_error
        return self.eth_balance

    async def call(self, contract_address: str, abi: list, function: str, *args: Any) -> Any:
        self.calls.append({"contract": contract_address, "function": function, "args": args})
        self.events.append(("call", function))
        if self.call_error:
            raise self.call_error
        return self.usdc_balance

    async def write_contract(self, contract_address, abi, function, args=(), value=0) -> str:
        self.events.append(("submit", function))
        if function in self.submit_errors:
            raise self.submit_errors[function]

        tx_hash = f"0x{len(self.writes) + 1:064x}"
        self.writes.append({
            "contract": contract_address,
            "function": function,
            "args": tuple(args),
            "value": value,
            "tx_hash": tx_hash,
        })
        self._functions_by_hash[tx_hash] = function
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> dict:
        function = self._functions_by_hash[tx_hash]
        self.events.append(("confirm", function))
        if function in self.receipt_errors:
            raise self.receipt_errors[function]
        return {"transactionHash": tx_hash, "status": 1, "blockNumber": 1}


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh settings cache and lock registry for each test."""
    get_settings.cache_clear()
    clear_account_locks()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_client() -> FakeChainClient:
    return FakeChainClient()
