"""Point-in-time pricing with caching, fallbacks and interpolation."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, NamedTuple, Optional

from .models import AssetState
from .oracle import PriceOracle, QuoteResult
from .sampler import snap_to_grid

logger = logging.getLogger(__name__)


class PriceKey(NamedTuple):
    symbol: str
    category: str
    moment: date


class PriceCache:
    """Per-request price cache. Only strictly positive prices are stored."""

    def __init__(self) -> None:
        self._prices: Dict[PriceKey, float] = {}

    def get(self, symbol: str, category: str, moment: date) -> Optional[float]:
        return self._prices.get(PriceKey(symbol, category, moment))

    def put(self, symbol: str, category: str, moment: date, price: float) -> bool:
        if price <= 0:
            return False
        self._prices[PriceKey(symbol, category, moment)] = price
        return True

    def __len__(self) -> int:
        return len(self._prices)


def interpolate(prev_day: date, prev_price: float, next_day: date, next_price: float, day: date) -> float:
    """Linear interpolation between two priced anchors."""

    span = (next_day - prev_day).days
    if span <= 0:
        return prev_price
    ratio = (day - prev_day).days / span
    return prev_price + (next_price - prev_price) * ratio


class PriceResolver:
    """Resolves an asset's price in the base currency at a date.

    ``last_known_price`` on each :class:`AssetState` is refreshed on every
    successful past/present lookup so later failures degrade to a stale price.
    """

    def __init__(
        self,
        oracle: PriceOracle,
        *,
        base_currency: str = "BRL",
        today: date | None = None,
        cache: PriceCache | None = None,
    ):
        self.oracle = oracle
        self.base_currency = base_currency.upper()
        self.today = today or date.today()
        self.cache = cache if cache is not None else PriceCache()

    def _to_base(self, quote: QuoteResult, state: AssetState) -> float:
        if not quote.usable:
            return 0.0
        price = quote.price
        currency = quote.currency or state.currency
        if currency and currency.upper() != self.base_currency:
            try:
                price *= self.oracle.exchange_rate(currency.upper(), self.base_currency)
            except (KeyError, ValueError) as exc:
                logger.warning(
                    "No %s->%s rate for %s: %s", currency, self.base_currency, state.symbol, exc
                )
                return 0.0
        return price

    def fetch_quote(self, state: AssetState, on: date | None, at: datetime | None = None) -> float:
        """Issue one oracle lookup; ``on=None`` requests the current quote."""

        quote = self.oracle.quote(state.symbol, state.category, on, at)
        return self._to_base(quote, state)

    def fixed_income_price(self, state: AssetState, on: date) -> float:
        total_value = 0.0
        for layer in state.layers:
            total_value += self.oracle.fixed_income_value(
                layer.original_amount,
                state.instrument_type,
                state.yield_type,
                state.reference_index,
                state.index_percentage,
                state.fixed_rate,
                layer.acquisition_date,
                state.maturity_date,
                on,
            )
        qty = state.total_quantity
        price = total_value / qty if qty > 0 else 0.0
        if price <= 0:
            price = state.last_known_price if state.last_known_price > 0 else state.average_cost
        state.last_known_price = price
        return price

    def resolve(self, state: AssetState, on: date, at: datetime | None = None) -> float:
        if state.is_fixed_income:
            return self.fixed_income_price(state, on)

        moment = at if at is not None else on
        cached = self.cache.get(state.symbol, state.category, moment)
        if cached is not None:
            return cached

        is_future = on > self.today
        if is_future:
            # No forward-looking simulation: the current quote stands in.
            price = self.fetch_quote(state, None)
        else:
            price = self.fetch_quote(state, on, at)

        if price <= 0:
            if is_future and state.last_known_price > 0:
                price = state.last_known_price
            else:
                fallback = state.last_known_price if state.last_known_price > 0 else state.average_cost
                if fallback > 0:
                    price = fallback
                else:
                    price = self.fetch_quote(state, None)
                    if price <= 0:
                        price = state.average_cost
                        if state.total_quantity > 0:
                            logger.error(
                                "No price available for %s/%s on %s despite open quantity %.6f",
                                state.category,
                                state.symbol,
                                on.isoformat(),
                                state.total_quantity,
                            )

        if price > 0:
            if not is_future or state.last_known_price <= 0:
                state.last_known_price = price
            self.cache.put(state.symbol, state.category, moment, price)
        return price

    def price_for_point(
        self,
        state: AssetState,
        on: date,
        at: datetime | None = None,
        price_interval: int = 1,
    ) -> float:
        """Price ``state`` for a sample point using the coarsened lookup grid."""

        if state.is_fixed_income:
            return self.resolve(state, on)

        lookup = snap_to_grid(on, price_interval)
        price = self.resolve(state, lookup, at if lookup == on else None)
        if price_interval <= 1 or lookup == on:
            return price

        next_day = lookup + timedelta(days=price_interval)
        prev_price = self.cache.get(state.symbol, state.category, lookup)
        next_price = self.cache.get(state.symbol, state.category, next_day)
        if prev_price is not None and next_price is not None:
            return interpolate(lookup, prev_price, next_day, next_price, on)
        if prev_price is not None:
            return prev_price
        if next_price is not None:
            return next_price
        return price


__all__ = ["PriceCache", "PriceKey", "PriceResolver", "interpolate"]
