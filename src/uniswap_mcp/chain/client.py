"""Chain client for an Ethereum-compatible JSON-RPC endpoint.

Wraps a web3.py connection and a signing account:
- Reads: native balance, contract view calls
- Writes: build, sign and submit contract transactions
- Confirmation: poll for a receipt until mined or timed out

HTTPProvider is synchronous, so every RPC round trip runs in the event
loop's executor. Every failure leaves this module as a ChainError.
"""

import asyncio
import functools
import logging
import threading
from typing import Any, Callable, Optional, Sequence, TypeVar

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TransactionNotFound

from uniswap_mcp.config import Settings
from uniswap_mcp.errors import ChainError, ErrorKind, TransactionReverted, classify

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChainClient:
    """Read/write access to one chain endpoint for one signing account."""

    def __init__(
        self,
        rpc_url: str,
        account: Optional[LocalAccount] = None,
        chain_id: Optional[int] = None,
        confirmation_timeout: int = 120,
        poll_interval: float = 1.0,
        web3: Optional[Web3] = None,
    ):
        self.rpc_url = rpc_url
        self.account = account
        self.chain_id = chain_id
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self._web3 = web3

        # Next nonce per sender, guarded so concurrent submissions never share one
        self._nonce_cache: dict[str, int] = {}
        self._nonce_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, account: Optional[LocalAccount] = None) -> "ChainClient":
        return cls(
            rpc_url=settings.rpc_url,
            account=account,
            chain_id=settings.chain_id,
            confirmation_timeout=settings.confirmation_timeout,
            poll_interval=settings.poll_interval,
        )

    @property
    def web3(self) -> Web3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url))
        return self._web3

    @property
    def address(self) -> Optional[str]:
        """Address of the signing account, if any."""
        return self.account.address if self.account else None

    @staticmethod
    def to_checksum(address: str) -> str:
        """Normalize an address to its checksum form.

        Raises:
            ChainError: INPUT if the address is malformed
        """
        try:
            return Web3.to_checksum_address(address)
        except Exception as e:
            raise ChainError(ErrorKind.INPUT, f"Invalid address {address!r}: {e}") from e

    def _require_account(self) -> LocalAccount:
        if self.account is None:
            raise ChainError(
                ErrorKind.INPUT,
                "No signing account configured (set PRIVATE_KEY or WALLET_SEED_PHRASE)",
            )
        return self.account

    async def _run_blocking(self, fn: Callable[..., T], *args: Any) -> T:
        """Run a blocking web3 call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, address: str) -> int:
        """Native balance of an address in wei."""
        checksum = self.to_checksum(address)
        try:
            return await self._run_blocking(self.web3.eth.get_balance, checksum)
        except Exception as e:
            raise classify(e) from e

    def _call(self, contract_address: str, abi: list, function: str, args: tuple) -> Any:
        contract = self.web3.eth.contract(address=contract_address, abi=abi)
        return getattr(contract.functions, function)(*args).call()

    async def call(self, contract_address: str, abi: list, function: str, *args: Any) -> Any:
        """Run a read-only contract call against the latest block."""
        contract_checksum = self.to_checksum(contract_address)
        try:
            return await self._run_blocking(self._call, contract_checksum, abi, function, args)
        except Exception as e:
            raise classify(e) from e

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _get_next_nonce(self, address: str) -> int:
        """Get next nonce for address.

        Uses the higher of the pending chain nonce and the cached next nonce,
        so transactions submitted back to back never reuse one.
        """
        with self._nonce_lock:
            chain_nonce = self.web3.eth.get_transaction_count(address, "pending")
            cached_nonce = self._nonce_cache.get(address, 0)
            next_nonce = max(chain_nonce, cached_nonce)
            self._nonce_cache[address] = next_nonce + 1
            return next_nonce

    def _reset_nonce_cache(self, address: str) -> None:
        """Forget the cached nonce so the next tx re-reads it from the node."""
        with self._nonce_lock:
            self._nonce_cache.pop(address, None)

    def _build_transaction(
        self,
        account: LocalAccount,
        contract_address: str,
        abi: list,
        function: str,
        args: Sequence[Any],
        value: int,
    ) -> dict:
        try:
            contract = self.web3.eth.contract(address=contract_address, abi=abi)
            tx_params = {"from": account.address, "value": value}
            if self.chain_id is not None:
                tx_params["chainId"] = self.chain_id
            tx_params["nonce"] = self._get_next_nonce(account.address)
            return getattr(contract.functions, function)(*args).build_transaction(tx_params)
        except Exception:
            self._reset_nonce_cache(account.address)
            raise

    async def write_contract(
        self,
        contract_address: str,
        abi: list,
        function: str,
        args: Sequence[Any] = (),
        value: int = 0,
    ) -> str:
        """Build, sign and submit a contract transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        account = self._require_account()
        contract_checksum = self.to_checksum(contract_address)

        try:
            tx = await self._run_blocking(
                self._build_transaction, account, contract_checksum, abi, function, tuple(args), value
            )
        except Exception as e:
            raise classify(e) from e

        tx_hash = await self.sign_and_send_transaction(tx)
        logger.info(f"Submitted {function} on {contract_checksum}: {tx_hash}")
        return tx_hash

    def _sign_and_send(self, account: LocalAccount, tx_params: dict) -> str:
        try:
            if "from" not in tx_params:
                tx_params["from"] = account.address

            if "nonce" not in tx_params:
                tx_params["nonce"] = self._get_next_nonce(account.address)

            if "chainId" not in tx_params:
                tx_params["chainId"] = self.chain_id if self.chain_id is not None else self.web3.eth.chain_id

            if "gas" not in tx_params:
                tx_params["gas"] = self.web3.eth.estimate_gas(tx_params)

            if "gasPrice" not in tx_params and "maxFeePerGas" not in tx_params:
                tx_params["gasPrice"] = self.web3.eth.gas_price

            signed_tx = account.sign_transaction(tx_params)
            tx_hash = self.web3.eth.send_raw_transaction(signed_tx.raw_transaction)
            return Web3.to_hex(tx_hash)
        except Exception:
            # Next tx gets a fresh nonce from the node
            self._reset_nonce_cache(account.address)
            raise

    async def sign_and_send_transaction(self, tx_params: dict) -> str:
        """Sign and send an EVM transaction, filling missing fields from the node.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        account = self._require_account()
        try:
            return await self._run_blocking(self._sign_and_send, account, tx_params)
        except Exception as e:
            raise classify(e) from e

    def _get_receipt(self, tx_hash: str) -> Optional[dict]:
        try:
            return self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None

    async def wait_for_receipt(self, tx_hash: str) -> dict:
        """Wait for a transaction to be mined.

        Returns:
            Transaction receipt dict

        Raises:
            TransactionReverted: If the transaction was mined with status 0
            ChainError: TRANSPORT if not mined within confirmation_timeout
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.confirmation_timeout

        while True:
            try:
                receipt = await self._run_blocking(self._get_receipt, tx_hash)
            except Exception as e:
                raise classify(e) from e

            if receipt is not None:
                if receipt["status"] == 0:
                    raise TransactionReverted(tx_hash)
                logger.debug(f"Transaction {tx_hash} mined in block {receipt['blockNumber']}")
                return dict(receipt)

            if loop.time() >= deadline:
                raise ChainError(
                    ErrorKind.TRANSPORT,
                    f"Transaction {tx_hash} not confirmed after {self.confirmation_timeout}s",
                )

            await asyncio.sleep(self.poll_interval)
