"""Sample-point generation for the evolution chart.

Two granularities are chosen from the span: the display step (how far apart
the labelled points are) and the price-lookup interval (how far apart the
oracle is queried). They are bounded separately.
"""
from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Iterator, List

from .errors import SpanTooLargeError
from .models import SamplePoint, TimeAxis

MAX_SPAN_DAYS = 3650
MAX_POINTS = 200
ROUND_STEPS = (1, 3, 7, 14, 30, 60)
INTRADAY_STEP = timedelta(hours=2)

LABEL_FORMAT = "%d/%m"
LABEL_FORMAT_WITH_YEAR = "%d/%m/%Y"
HOURLY_LABEL_FORMAT = "%H:%M"

_EPOCH = date(1970, 1, 1)


def day_step_for(total_days: int) -> int:
    """Return the display step in days for a span of ``total_days``."""

    step = 1
    if total_days > 730:
        step = 7
    elif total_days > 180:
        step = 3
    if total_days > MAX_POINTS:
        needed = math.ceil(total_days / MAX_POINTS)
        snapped = next((candidate for candidate in ROUND_STEPS if needed <= candidate), ROUND_STEPS[-1])
        step = max(step, snapped)
    return step


def price_interval_for(total_days: int) -> int:
    """Return the oracle lookup interval in days for a span of ``total_days``."""

    if total_days > 730:
        return 14
    if total_days > 365:
        return 7
    if total_days > 180:
        return 3
    return 1


def snap_to_grid(day: date, interval: int) -> date:
    """Round ``day`` down to the lookup grid anchored at the Unix epoch."""

    if interval <= 1:
        return day
    offset = (day - _EPOCH).days
    return _EPOCH + timedelta(days=offset - offset % interval)


def price_grid(start: date, end: date, interval: int) -> Iterator[date]:
    """Yield grid anchors covering ``[start, end]``, starting at or before ``start``."""

    step = timedelta(days=max(interval, 1))
    cursor = snap_to_grid(start, interval)
    while cursor <= end:
        yield cursor
        cursor += step


def _daily_points(start: date, end: date, step: int, show_year: bool) -> List[SamplePoint]:
    fmt = LABEL_FORMAT_WITH_YEAR if show_year else LABEL_FORMAT
    points: List[SamplePoint] = []
    cursor = start
    while cursor <= end:
        points.append(SamplePoint(label=cursor.strftime(fmt), on=cursor))
        cursor += timedelta(days=step)
    if points[-1].on != end:
        points.append(SamplePoint(label=end.strftime(fmt), on=end))
    return points


def _intraday_points(start: date, end: date) -> List[SamplePoint]:
    cursor = datetime.combine(start, time.min)
    stop = max(datetime.combine(end, time.min), cursor + timedelta(days=1))
    points: List[SamplePoint] = []
    while cursor <= stop:
        if cursor.date() > start and cursor.time() == time.min:
            label = "24:00"
        else:
            label = cursor.strftime(HOURLY_LABEL_FORMAT)
        points.append(SamplePoint(label=label, on=cursor.date(), moment=cursor))
        cursor += INTRADAY_STEP
    return points


def build_time_axis(start: date, end: date, *, intraday: bool = False) -> TimeAxis:
    """Return the sample points for ``[start, end]``.

    Reversed bounds are swapped. Spans above ``MAX_SPAN_DAYS`` raise
    :class:`SpanTooLargeError`. Intraday sampling (every two hours) applies
    only to spans of at most one day.
    """

    if start > end:
        start, end = end, start
    total_days = (end - start).days
    if total_days > MAX_SPAN_DAYS:
        raise SpanTooLargeError(total_days, MAX_SPAN_DAYS)

    price_interval = price_interval_for(total_days)
    if intraday and total_days <= 1:
        return TimeAxis(
            start=start,
            end=end,
            total_days=total_days,
            points=_intraday_points(start, end),
            day_step=1,
            price_interval=price_interval,
            resolution="2h",
            show_year=False,
        )

    step = day_step_for(total_days)
    show_year = total_days > 365
    return TimeAxis(
        start=start,
        end=end,
        total_days=total_days,
        points=_daily_points(start, end, step, show_year),
        day_step=step,
        price_interval=price_interval,
        resolution="1d",
        show_year=show_year,
    )


__all__ = [
    "MAX_POINTS",
    "MAX_SPAN_DAYS",
    "build_time_axis",
    "day_step_for",
    "price_grid",
    "price_interval_for",
    "snap_to_grid",
]
