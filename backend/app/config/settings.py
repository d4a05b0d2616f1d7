"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

from portfolio_evolution.accrual import DEFAULT_INDEX_RATES

DEFAULT_BASE_CURRENCY = "BRL"


class AppSettings(BaseSettings):
    """Configuration options for the investment evolution service."""

    app_name: str = Field(default="Investment Evolution Service")
    log_level: str = Field(default="INFO")
    base_currency: str = Field(default=DEFAULT_BASE_CURRENCY)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    portfolio_service_url: str = Field(
        default="http://localhost:8200/portfolio",
        description="Base URL of the service holding raw investment contributions",
    )
    portfolio_service_token: str | None = Field(
        default=None,
        description="Optional shared secret for portfolio service authentication",
    )
    portfolio_service_timeout_seconds: float = Field(default=15.0)

    quote_service_url: str = Field(
        default="http://localhost:8300",
        description="Base URL of the quote service used as price oracle",
    )
    quote_service_timeout_seconds: float = Field(default=10.0)

    fx_base_url: str = Field(default="https://api.frankfurter.app")
    fx_cache_ttl_seconds: int = Field(default=60 * 60)
    fallback_fx_rates: dict[str, float] = Field(
        default_factory=lambda: {"USD": 6.0},
        description="Units of base currency per unit of foreign currency, used when live FX fails.",
    )
    index_rates: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_INDEX_RATES),
        description="Annual percentage rates of fixed-income reference indices.",
    )

    prefetch_max_lookups_per_asset: int = Field(default=100, ge=1)
    prefetch_pause_every: int = Field(default=10, ge=0)
    prefetch_pause_seconds: float = Field(default=0.05, ge=0.0)

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="investment-evolution")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"portfolio_service_token"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_BASE_CURRENCY",
    "get_settings",
]
