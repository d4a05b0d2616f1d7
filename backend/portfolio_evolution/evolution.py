"""Portfolio evolution: invested vs. market value over a date range."""
from __future__ import annotations

import calendar
import logging
import time
from datetime import date
from typing import Callable, Optional, Sequence, Tuple

from .aggregator import SeriesAggregator
from .errors import InvalidDateError
from .ledger import PositionLedger
from .models import AssetState, EvolutionSeries, SamplePoint, Transaction
from .oracle import PriceOracle
from .prefetch import (
    DEFAULT_MAX_LOOKUPS_PER_ASSET,
    DEFAULT_PAUSE_EVERY,
    DEFAULT_PAUSE_SECONDS,
    QuotePrefetcher,
)
from .pricing import PriceResolver
from .sampler import build_time_axis

logger = logging.getLogger(__name__)

PERIODS = ("1D", "1W", "1M", "6M", "YTD", "1Y", "5Y", "ALL")
INTRADAY_PERIOD = "1D"
PREFETCH_MIN_SPAN_DAYS = 365


def parse_iso_date(value: date | str | None, field: str) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidDateError(field, value) from exc


def _minus_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def resolve_period_start(period: str | None, end: date, transactions: Sequence[Transaction]) -> date:
    """Derive the start date implied by a period token.

    Unknown or missing tokens default to one month before ``end``.
    """

    token = (period or "").upper()
    if token and token not in PERIODS:
        logger.warning("Unknown period %r, defaulting to 1M", period)
    if token == "1D":
        return date.fromordinal(end.toordinal() - 1)
    if token == "1W":
        return date.fromordinal(end.toordinal() - 7)
    if token == "1M":
        return _minus_months(end, 1)
    if token == "6M":
        return _minus_months(end, 6)
    if token == "YTD":
        return date(end.year, 1, 1)
    if token == "1Y":
        return _minus_months(end, 12)
    if token == "5Y":
        return _minus_months(end, 60)
    if token == "ALL" and transactions:
        return min(tx.date for tx in transactions)
    return _minus_months(end, 1)


def resolve_date_range(
    start: date | str | None,
    end: date | str | None,
    period: str | None,
    transactions: Sequence[Transaction],
    today: date,
) -> Tuple[date, date]:
    end_date = parse_iso_date(end, "endDate") or today
    start_date = parse_iso_date(start, "startDate")
    if start_date is None:
        start_date = resolve_period_start(period, end_date, transactions)
    return start_date, end_date


def build_evolution_series(
    transactions: Sequence[Transaction],
    oracle: PriceOracle,
    *,
    start: date | str | None = None,
    end: date | str | None = None,
    period: str | None = None,
    base_currency: str = "BRL",
    today: date | None = None,
    max_lookups_per_asset: int = DEFAULT_MAX_LOOKUPS_PER_ASSET,
    pause_every: int = DEFAULT_PAUSE_EVERY,
    pause_seconds: float = DEFAULT_PAUSE_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> EvolutionSeries:
    """Reconstruct invested and current portfolio value for a date range.

    All state (ledger, price cache, last known prices) lives for this call
    only. Raises :class:`SpanTooLargeError` or :class:`InvalidDateError`
    before any pricing takes place.
    """

    today = today or date.today()
    start_date, end_date = resolve_date_range(start, end, period, transactions, today)
    intraday = (period or "").upper() == INTRADAY_PERIOD
    axis = build_time_axis(start_date, end_date, intraday=intraday)

    if not transactions:
        return EvolutionSeries(start=axis.start, end=axis.end, resolution=axis.resolution)

    resolver = PriceResolver(oracle, base_currency=base_currency, today=today)
    if axis.total_days > PREFETCH_MIN_SPAN_DAYS:
        QuotePrefetcher(
            resolver,
            max_lookups_per_asset=max_lookups_per_asset,
            pause_every=pause_every,
            pause_seconds=pause_seconds,
            sleep=sleep,
        ).prefetch(transactions, axis.start, axis.end, axis.price_interval)

    price_interval = 1 if axis.resolution == "2h" else axis.price_interval

    def price_fn(state: AssetState, point: SamplePoint) -> float:
        return resolver.price_for_point(state, point.on, point.moment, price_interval)

    ledger = PositionLedger(transactions)
    aggregator = SeriesAggregator()
    for point in axis.points:
        ledger.advance(point.on)
        aggregator.record(point, ledger.assets.values(), price_fn)

    series = aggregator.result(axis.start, axis.end, axis.resolution)
    logger.info(
        "Built evolution series %s..%s: %d points, step %dd, price interval %dd, %d cached prices",
        axis.start.isoformat(),
        axis.end.isoformat(),
        series.points,
        axis.day_step,
        price_interval,
        len(resolver.cache),
    )
    return series


__all__ = [
    "PERIODS",
    "build_evolution_series",
    "parse_iso_date",
    "resolve_date_range",
    "resolve_period_start",
]
