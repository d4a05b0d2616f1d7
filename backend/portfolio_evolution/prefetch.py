"""Cache warm-up for long evolution ranges."""
from __future__ import annotations

import logging
import time
from datetime import date
from typing import Callable, Iterable, List, Sequence

from .ledger import PositionLedger
from .models import AssetState, Transaction
from .pricing import PriceResolver
from .sampler import price_grid

logger = logging.getLogger(__name__)

DEFAULT_MAX_LOOKUPS_PER_ASSET = 100
DEFAULT_PAUSE_EVERY = 10
DEFAULT_PAUSE_SECONDS = 0.05


class QuotePrefetcher:
    """Pre-populates the resolver cache on the price-lookup grid.

    Lookups are issued sequentially, at most ``max_lookups_per_asset`` per
    asset, with a short pause every ``pause_every`` lookups to throttle the
    oracle.
    """

    def __init__(
        self,
        resolver: PriceResolver,
        *,
        max_lookups_per_asset: int = DEFAULT_MAX_LOOKUPS_PER_ASSET,
        pause_every: int = DEFAULT_PAUSE_EVERY,
        pause_seconds: float = DEFAULT_PAUSE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.resolver = resolver
        self.max_lookups_per_asset = max_lookups_per_asset
        self.pause_every = pause_every
        self.pause_seconds = pause_seconds
        self._sleep = sleep

    def discover_assets(self, transactions: Sequence[Transaction], start: date, end: date) -> List[AssetState]:
        """Replay the whole history once and return the quotable assets.

        Fixed-income instruments are valued by accrual and skipped. Assets
        fully liquidated before ``start`` are skipped too.
        """

        ledger = PositionLedger(transactions)
        ledger.advance(end)
        seen: set[tuple[str, str]] = set()
        assets: List[AssetState] = []
        for state in ledger.assets.values():
            if state.is_fixed_income:
                continue
            if state.is_empty and (state.last_transaction_date is None or state.last_transaction_date < start):
                continue
            identity = (state.category, state.symbol)
            if identity in seen:
                continue
            seen.add(identity)
            assets.append(state)
        return assets

    def _grid_for(self, state: AssetState, start: date, end: date, interval: int) -> Iterable[date]:
        first = start
        if state.first_transaction_date is not None and state.first_transaction_date > first:
            first = state.first_transaction_date
        last = min(end, self.resolver.today)
        return price_grid(first, last, interval)

    def prefetch(
        self,
        transactions: Sequence[Transaction],
        start: date,
        end: date,
        price_interval: int,
    ) -> int:
        """Warm the cache and return the number of oracle lookups issued."""

        cache = self.resolver.cache
        total = 0
        assets = self.discover_assets(transactions, start, end)
        for state in assets:
            lookups = 0
            for day in self._grid_for(state, start, end, price_interval):
                if lookups >= self.max_lookups_per_asset:
                    break
                if cache.get(state.symbol, state.category, day) is not None:
                    continue
                price = self.resolver.fetch_quote(state, day)
                cache.put(state.symbol, state.category, day, price)
                lookups += 1
                if self.pause_every and lookups % self.pause_every == 0:
                    self._sleep(self.pause_seconds)
            total += lookups
        logger.info(
            "Prefetched %d quotes for %d assets between %s and %s (interval %dd)",
            total,
            len(assets),
            start.isoformat(),
            end.isoformat(),
            price_interval,
        )
        return total


__all__ = ["QuotePrefetcher"]
