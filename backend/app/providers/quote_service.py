"""HTTP price oracle backed by the quote service."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping

import httpx

from app.providers.fx_rates import FrankfurterRateProvider
from portfolio_evolution.accrual import accrue
from portfolio_evolution.oracle import QuoteResult

logger = logging.getLogger(__name__)


class QuoteServiceOracle:
    """Synchronous oracle: quotes over HTTP, FX via Frankfurter, local accrual.

    Quote failures never raise; they come back as unsuccessful results so the
    valuation engine can fall back to stale prices.
    """

    def __init__(
        self,
        base_url: str,
        *,
        fx: FrankfurterRateProvider,
        index_rates: Mapping[str, float] | None = None,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.fx = fx
        self.index_rates = dict(index_rates) if index_rates is not None else None
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def quote(
        self,
        symbol: str,
        category: str,
        on: date | None,
        at: datetime | None = None,
    ) -> QuoteResult:
        params: dict[str, Any] = {"category": category}
        if on is not None:
            params["date"] = on.isoformat()
        if at is not None:
            params["datetime"] = at.isoformat()
        url = f"{self.base_url}/quotes/{symbol}"
        try:
            response = self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Quote service unreachable for %s: %s", symbol, exc)
            return QuoteResult.failure(str(exc))

        if response.status_code >= 400:
            logger.warning("Quote service error %s for %s", response.status_code, symbol)
            return QuoteResult.failure(f"Quote service error {response.status_code}")
        try:
            payload = response.json()
        except ValueError:
            return QuoteResult.failure("Quote service returned invalid JSON payload")
        if not isinstance(payload, dict):
            return QuoteResult.failure("Quote service response is not an object")

        try:
            price = float(payload.get("price") or 0.0)
        except (TypeError, ValueError):
            return QuoteResult.failure(f"Invalid price {payload.get('price')!r} for {symbol}")
        return QuoteResult(
            success=bool(payload.get("success", True)),
            price=price,
            currency=payload.get("currency"),
            message=payload.get("message"),
        )

    def exchange_rate(self, from_currency: str, to_currency: str) -> float:
        return self.fx.rate(from_currency, to_currency)

    def fixed_income_value(
        self,
        principal: float,
        instrument_type: str | None,
        yield_type: str | None,
        reference_index: str | None,
        index_percentage: float | None,
        fixed_rate: float | None,
        start: date | None,
        maturity: date | None,
        as_of: date,
    ) -> float:
        return accrue(
            principal,
            instrument_type,
            yield_type,
            reference_index,
            index_percentage,
            fixed_rate,
            start,
            maturity,
            as_of,
            index_rates=self.index_rates,
        )

    def close(self) -> None:
        self._client.close()
        self.fx.close()


__all__ = ["QuoteServiceOracle"]
