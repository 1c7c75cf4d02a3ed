"""
Checkout Configuration Management

Centralized configuration using Pydantic Settings for type-safe environment
variable loading with validation.
"""

import json
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from checkout.models.money import Money
from checkout.models.sku import validate_sku


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ═══════════════════════════════════════════════════════════════
    # APPLICATION
    # ═══════════════════════════════════════════════════════════════
    app_name: str = Field(default="scan-checkout", description="Application name")
    app_env: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool | None = Field(
        default=None,
        description="Render logs as JSON (defaults to on in production)",
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    # ═══════════════════════════════════════════════════════════════
    # CART
    # ═══════════════════════════════════════════════════════════════
    cart_initial_version: int = Field(
        default=1, ge=1, description="Version assigned to newly created carts"
    )
    scan_conflict_retries: int = Field(
        default=1,
        ge=0,
        description="Times the API re-invokes a scan after a version conflict",
    )
    require_idempotency_key: bool = Field(
        default=True, description="Reject scans without an Idempotency-Key header"
    )

    # ═══════════════════════════════════════════════════════════════
    # PRICE FEED
    # ═══════════════════════════════════════════════════════════════
    price_feed_latency_ms: int = Field(
        default=0, ge=0, description="Simulated latency of the static price feed"
    )
    price_feed_prices: dict[str, str] = Field(
        default_factory=dict,
        description='Price overrides as JSON, e.g. {"APE": "75", "PUNK": "60.5"}',
    )

    @field_validator("price_feed_prices", mode="before")
    @classmethod
    def parse_price_overrides(cls, v: Any) -> Any:
        """Accept a JSON string as well as a mapping."""
        if isinstance(v, str):
            if not v.strip():
                return {}
            return json.loads(v)
        return v

    @field_validator("price_feed_prices")
    @classmethod
    def validate_price_overrides(cls, v: dict[str, str]) -> dict[str, str]:
        """Price overrides must name catalog SKUs and hold exact amounts."""

        normalized: dict[str, str] = {}
        for raw_sku, amount in v.items():
            sku = validate_sku(raw_sku)
            Money.from_decimal_string(str(amount))
            normalized[sku.value] = str(amount)
        return normalized

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def json_logs(self) -> bool:
        if self.log_json is None:
            return self.is_production
        return self.log_json


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
