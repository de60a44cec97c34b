"""Application configuration using pydantic-settings.

The signing account is resolved from either a raw private key or a
seed phrase (BIP-44 derivation, same path Trust Wallet / MetaMask use).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TRANSPORTS = ("stdio", "sse", "streamable-http")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Chain
    # ======================
    rpc_url: str = Field(
        default="http://localhost:8545", description="Ethereum JSON-RPC URL (local fork by default)"
    )
    chain_id: Optional[int] = Field(
        default=None, description="Chain ID; read from the node when not set"
    )

    # ======================
    # Signing account
    # ======================
    private_key: Optional[str] = Field(
        default=None, description="Hex private key of the account that sends swap transactions"
    )
    wallet_seed_phrase: Optional[str] = Field(
        default=None, description="12/24 word seed phrase, used when PRIVATE_KEY is not set"
    )
    account_index: int = Field(default=0, description="BIP-44 address index for the seed phrase")

    # ======================
    # Transactions
    # ======================
    confirmation_timeout: int = Field(
        default=120, description="Seconds to wait for a transaction receipt"
    )
    poll_interval: float = Field(default=1.0, description="Seconds between receipt polls")
    swap_lock_timeout: float = Field(
        default=300.0, description="Seconds to wait for another swap from the same account"
    )

    # ======================
    # Server
    # ======================
    transport: str = Field(default="stdio", description="MCP transport: stdio, sse or streamable-http")
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def has_signer(self) -> bool:
        """Check if a signing credential is configured."""
        if self.private_key:
            return True
        return bool(self.wallet_seed_phrase and len(self.wallet_seed_phrase.split()) >= 12)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "rpc_url": self.rpc_url,
            "chain_id": self.chain_id if self.chain_id is not None else "(from node)",
            "private_key": "***" if self.private_key else "(not set)",
            "wallet_seed_phrase": "***" if self.wallet_seed_phrase else "(not set)",
            "account_index": self.account_index,
            "confirmation_timeout": self.confirmation_timeout,
            "poll_interval": self.poll_interval,
            "swap_lock_timeout": self.swap_lock_timeout,
            "transport": self.transport,
            "debug": self.debug,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
