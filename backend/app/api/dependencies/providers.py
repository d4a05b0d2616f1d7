"""Dependency providers for the transaction source and price oracle."""

from __future__ import annotations

from typing import Iterator

from app.config import AppSettings, get_settings
from app.providers.fx_rates import FrankfurterRateProvider, static_rates
from app.providers.quote_service import QuoteServiceOracle
from app.services.transactions import PortfolioServiceTransactionSource, TransactionSource
from portfolio_evolution import PriceOracle


def get_app_settings() -> AppSettings:
    return get_settings()


def get_transaction_source() -> TransactionSource:
    settings = get_settings()
    return PortfolioServiceTransactionSource(
        settings.portfolio_service_url,
        token=settings.portfolio_service_token,
        timeout_seconds=settings.portfolio_service_timeout_seconds,
    )


def get_price_oracle() -> Iterator[PriceOracle]:
    """Yield a per-request oracle and close its HTTP clients afterwards."""

    settings = get_settings()
    fx = FrankfurterRateProvider(
        base_url=settings.fx_base_url,
        cache_ttl_seconds=settings.fx_cache_ttl_seconds,
        fallback=static_rates(settings.fallback_fx_rates, settings.base_currency),
    )
    oracle = QuoteServiceOracle(
        settings.quote_service_url,
        fx=fx,
        index_rates=settings.index_rates,
        timeout_seconds=settings.quote_service_timeout_seconds,
    )
    try:
        yield oracle
    finally:
        oracle.close()


__all__ = ["get_app_settings", "get_price_oracle", "get_transaction_source"]
