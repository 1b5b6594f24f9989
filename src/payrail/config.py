"""Gateway configuration.

Environment is read once, here, into ``GatewaySettings``; everything past
this module receives an explicit ``RuntimeConfig``.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from payrail.exceptions import ConfigurationError
from payrail.rails import (
    CardRailAdapter,
    CoinbaseCommerceAdapter,
    CryptoRailAdapter,
    PrimerCardAdapter,
    SimulatedCardAdapter,
    SimulatedCryptoAdapter,
)

RailMode = Literal["simulated", "live"]

# Placeholder credentials shipped in demo environments
MOCK_PRIMER_API_KEY = "mock-primer-key"
MOCK_COINBASE_API_KEY = "mock-coinbase-key"


@dataclass(frozen=True)
class RuntimeConfig:
    """Explicit runtime configuration consumed by the orchestrator."""
    card_mode: RailMode = "simulated"
    crypto_mode: RailMode = "simulated"
    primer_api_key: Optional[str] = None
    primer_environment: str = "sandbox"
    coinbase_api_key: Optional[str] = None
    http_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.card_mode == "live" and not self.primer_api_key:
            raise ConfigurationError("Live card rail requires a Primer API key")
        if self.crypto_mode == "live" and not self.coinbase_api_key:
            raise ConfigurationError("Live crypto rail requires a Coinbase Commerce API key")


class GatewaySettings(BaseSettings):
    """Main payrail configuration."""

    # Primer (card rail)
    primer_api_key: str = ""
    primer_webhook_secret: str = ""
    primer_env: Literal["sandbox", "production"] = "sandbox"

    # Coinbase Commerce (crypto rail)
    coinbase_commerce_api_key: str = ""
    coinbase_commerce_webhook_secret: str = ""

    # Rail HTTP client timeout in seconds
    rail_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        env_prefix = "PAYRAIL_"
        env_file = ".env"
        extra = "ignore"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def card_live(self) -> bool:
        return bool(self.primer_api_key) and self.primer_api_key != MOCK_PRIMER_API_KEY

    @property
    def crypto_live(self) -> bool:
        return (
            bool(self.coinbase_commerce_api_key)
            and self.coinbase_commerce_api_key != MOCK_COINBASE_API_KEY
        )

    def to_runtime_config(self) -> RuntimeConfig:
        """Resolve rail modes from the configured credentials."""
        return RuntimeConfig(
            card_mode="live" if self.card_live else "simulated",
            crypto_mode="live" if self.crypto_live else "simulated",
            primer_api_key=self.primer_api_key if self.card_live else None,
            primer_environment=self.primer_env,
            coinbase_api_key=self.coinbase_commerce_api_key if self.crypto_live else None,
            http_timeout=self.rail_timeout_seconds,
        )


@lru_cache()
def get_settings() -> GatewaySettings:
    """Get cached settings instance."""
    return GatewaySettings()


def build_card_rail(config: RuntimeConfig) -> CardRailAdapter:
    """Card rail adapter for the configured mode."""
    if config.card_mode == "live":
        return PrimerCardAdapter(
            api_key=config.primer_api_key or "",
            environment=config.primer_environment,
            timeout=config.http_timeout,
        )
    return SimulatedCardAdapter()


def build_crypto_rail(config: RuntimeConfig) -> CryptoRailAdapter:
    """Crypto rail adapter for the configured mode."""
    if config.crypto_mode == "live":
        return CoinbaseCommerceAdapter(
            api_key=config.coinbase_api_key or "",
            timeout=config.http_timeout,
        )
    return SimulatedCryptoAdapter()
