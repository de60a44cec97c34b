"""Signing account resolution.

A raw private key takes priority; otherwise the key is derived from the
seed phrase on the standard Ethereum path m/44'/60'/0'/0/<index>.
"""

import logging
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from uniswap_mcp.config import Settings
from uniswap_mcp.errors import ChainError, ErrorKind

logger = logging.getLogger(__name__)


def derive_private_key(seed_phrase: str, index: int = 0) -> bytes:
    """Derive EVM private key from seed phrase."""
    from bip_utils import (
        Bip39SeedGenerator, Bip44, Bip44Coins, Bip44Changes
    )

    seed = Bip39SeedGenerator(seed_phrase).Generate()
    bip44 = Bip44.FromSeed(seed, Bip44Coins.ETHEREUM)
    account = bip44.Purpose().Coin().Account(0).Change(Bip44Changes.CHAIN_EXT)
    return account.AddressIndex(index).PrivateKey().Raw().ToBytes()


def load_account(settings: Settings) -> Optional[LocalAccount]:
    """Build the signing account from settings, or None when not configured.

    Raises:
        ChainError: If a credential is configured but malformed
    """
    try:
        if settings.private_key:
            account = Account.from_key(settings.private_key)
            logger.info(f"Signing account loaded from private key: {account.address}")
            return account

        if settings.has_signer:
            key = derive_private_key(settings.wallet_seed_phrase, settings.account_index)
            account = Account.from_key(key)
            logger.info(
                f"Signing account derived from seed phrase (index {settings.account_index}): "
                f"{account.address}"
            )
            return account
    except Exception as e:
        # Message deliberately omits the credential itself
        raise ChainError(ErrorKind.INPUT, f"Invalid signing credential: {type(e).__name__}") from e

    return None
