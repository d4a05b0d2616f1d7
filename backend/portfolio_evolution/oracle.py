"""Price oracle interface consumed by the valuation engine."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping, Optional, Protocol

from .accrual import accrue
from .fx import FXRateProvider


@dataclass(frozen=True)
class QuoteResult:
    success: bool
    price: float = 0.0
    currency: Optional[str] = None
    message: Optional[str] = None

    @property
    def usable(self) -> bool:
        return self.success and self.price > 0

    @classmethod
    def failure(cls, message: str) -> "QuoteResult":
        return cls(success=False, message=message)


class PriceOracle(Protocol):
    """Pluggable source of quotes, FX rates and fixed-income valuations."""

    def quote(
        self,
        symbol: str,
        category: str,
        on: date | None,
        at: datetime | None = None,
    ) -> QuoteResult:
        """Return the quote for ``on``/``at``; ``on=None`` asks for the current quote."""
        ...

    def exchange_rate(self, from_currency: str, to_currency: str) -> float:
        ...

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
        ...


class InMemoryPriceOracle:
    """Deterministic oracle for tests and examples.

    ``prices`` maps a symbol to ``{date | datetime: price}``. A current quote
    comes from ``latest`` or, failing that, the most recent historical price.
    Every quote request is appended to ``calls``.
    """

    def __init__(
        self,
        prices: Mapping[str, Mapping[date | datetime, float]] | None = None,
        *,
        latest: Mapping[str, float] | None = None,
        currencies: Mapping[str, str] | None = None,
        default_currency: str = "BRL",
        fx: FXRateProvider | None = None,
        index_rates: Mapping[str, float] | None = None,
    ):
        self._prices = {symbol: dict(series) for symbol, series in (prices or {}).items()}
        self._latest = dict(latest or {})
        self._currencies = dict(currencies or {})
        self._default_currency = default_currency
        self._fx = fx or FXRateProvider()
        self._index_rates = index_rates
        self.calls: list[tuple[str, str, date | None, datetime | None]] = []

    def quote(
        self,
        symbol: str,
        category: str,
        on: date | None,
        at: datetime | None = None,
    ) -> QuoteResult:
        self.calls.append((symbol, category, on, at))
        currency = self._currencies.get(symbol, self._default_currency)
        series = self._prices.get(symbol, {})
        if on is None:
            price = self._latest.get(symbol)
            if price is None and series:
                price = series[max(series.keys(), key=_sort_key)]
        else:
            price = series.get(at) if at is not None and at in series else series.get(on)
        if price is None:
            return QuoteResult.failure(f"No price for {symbol}")
        return QuoteResult(success=True, price=float(price), currency=currency)

    def exchange_rate(self, from_currency: str, to_currency: str) -> float:
        return self._fx.rate(from_currency, to_currency)

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
            index_rates=self._index_rates,
        )


def _sort_key(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


__all__ = ["InMemoryPriceOracle", "PriceOracle", "QuoteResult"]
