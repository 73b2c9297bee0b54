"""Configuration via pydantic-settings.

Reads from a .env file or AKASH_* environment variables (AKASH_NODE,
AKASH_GAS, AKASH_GAS_ADJUSTMENT, AKASH_GAS_PRICES, ...). Raw gas values
are kept as strings here; FeeFactory parses and validates them so a
malformed value surfaces as a ConfigError before any network call.

Usage:
    from eve_deploy.config import get_settings
    settings = get_settings()
    fee_config = FeeFactory.from_settings(settings, node, keyring)

The pipeline never reads settings itself; callers pass explicit
objects built from them.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from eve_deploy.domain.enums import BroadcastMode


class Settings(BaseSettings):
    """Client configuration for talking to a ledger node."""

    model_config = SettingsConfigDict(
        env_prefix="AKASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    # --- Node ---
    node: str = "tcp://localhost:26657"
    chain_id: str = "akashnet-2"
    rpc_timeout_seconds: float = 30.0

    # --- Fees / Gas ---
    gas: str = "auto"
    gas_adjustment: str = "1.0"
    gas_prices: str = "0.025uakt"
    fee_granter: str | None = None

    # --- Signing ---
    from_name: str = Field(default="deploy", alias="AKASH_FROM")
    keyring_dir: Path = Path.home() / ".akash"

    # --- Broadcast ---
    broadcast_mode: BroadcastMode = BroadcastMode.BLOCK
    skip_confirm: bool = Field(default=False, alias="AKASH_YES")
    broadcast_timeout_seconds: float = 300.0
    broadcast_retry_period_seconds: float = 1.0

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = False

    @property
    def rpc_url(self) -> str:
        """Node URI with the tcp:// scheme swapped for http://."""
        if self.node.startswith("tcp://"):
            return "http://" + self.node[len("tcp://") :]
        return self.node


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the settings."""
    return Settings()
