"""Runtime configuration for satnames."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from satnames.shared.network import RetryConfig, TimeoutConfig

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_MARKET_API_URL = "https://ordinals.gorillapool.io/api"
DEFAULT_DOMAIN = "1sat.name"
DEFAULT_COLLECTOR_ADDRESS = "1sat4utxoLYSZb3zvWH8vZ9ULhGbPZEPi6"
DEFAULT_RETURN_URL = "http://localhost:5173/"
DEFAULT_WALLET_BRIDGE_URL = "http://localhost:3321"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def resolve_storage_dir(storage_dir: str | Path | None = None) -> Path:
    if storage_dir:
        return Path(storage_dir).expanduser()

    env_dir = os.getenv("SATNAMES_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    return Path.home() / ".config" / "satnames"


@dataclass
class AppConfig:
    api_url: str = DEFAULT_API_URL
    market_api_url: str = DEFAULT_MARKET_API_URL
    domain: str = DEFAULT_DOMAIN
    price_usd: float = 1.0
    product_id: str = ""
    collector_address: str = DEFAULT_COLLECTOR_ADDRESS
    marketplace_fee_rate: float = 0.15
    marketplace_fee_address: str = DEFAULT_COLLECTOR_ADDRESS
    return_url: str = DEFAULT_RETURN_URL
    wallet_bridge_url: str = DEFAULT_WALLET_BRIDGE_URL
    storage_dir: Path = field(default_factory=resolve_storage_dir)
    debounce_seconds: float = 0.5
    exchange_rate_max_age_seconds: float = 3600.0
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    @property
    def price_cents(self) -> int:
        return int(round(self.price_usd * 100))

    @classmethod
    def from_environment(cls) -> "AppConfig":
        return cls(
            api_url=os.getenv("SATNAMES_API_URL", DEFAULT_API_URL),
            market_api_url=os.getenv("SATNAMES_MARKET_API_URL", DEFAULT_MARKET_API_URL),
            domain=os.getenv("SATNAMES_DOMAIN", DEFAULT_DOMAIN),
            price_usd=_env_float("SATNAMES_PRICE_USD", 1.0),
            product_id=os.getenv("SATNAMES_PRODUCT_ID", ""),
            collector_address=os.getenv(
                "SATNAMES_COLLECTOR_ADDRESS", DEFAULT_COLLECTOR_ADDRESS
            ),
            marketplace_fee_rate=_env_float("SATNAMES_MARKET_FEE_RATE", 0.15),
            marketplace_fee_address=os.getenv(
                "SATNAMES_MARKET_FEE_ADDRESS", DEFAULT_COLLECTOR_ADDRESS
            ),
            return_url=os.getenv("SATNAMES_RETURN_URL", DEFAULT_RETURN_URL),
            wallet_bridge_url=os.getenv(
                "SATNAMES_WALLET_BRIDGE_URL", DEFAULT_WALLET_BRIDGE_URL
            ),
            storage_dir=resolve_storage_dir(),
            debounce_seconds=_env_float("SATNAMES_DEBOUNCE_SECONDS", 0.5),
            exchange_rate_max_age_seconds=_env_float(
                "SATNAMES_EXCHANGE_RATE_MAX_AGE", 3600.0
            ),
        )
