"""Accumulates per-point totals and per-category series."""
from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List

from .models import AssetState, CategorySeries, EvolutionSeries, SamplePoint

_CENTS = Decimal("0.01")

PriceFn = Callable[[AssetState, SamplePoint], float]


def round_money(value: float) -> float:
    """Round to cents, half away from zero."""

    return float(Decimal(repr(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


class SeriesAggregator:
    """Builds label-aligned invested/current arrays.

    Every category that has ever been tracked gets an entry at every point
    from then on, and is back-filled with zeros for earlier points, so all
    category arrays always have ``len(labels)`` entries.
    """

    def __init__(self) -> None:
        self.labels: List[str] = []
        self.invested: List[float] = []
        self.current: List[float] = []
        self.categories: Dict[str, CategorySeries] = {}

    def record(self, point: SamplePoint, assets: Iterable[AssetState], price_fn: PriceFn) -> None:
        total_invested = 0.0
        total_current = 0.0
        invested_by_category: Dict[str, float] = {}
        current_by_category: Dict[str, float] = {}
        seen_now: List[str] = []

        for state in assets:
            category = state.category
            seen_now.append(category)
            if state.is_empty:
                continue
            invested = state.total_cost_basis
            current = state.total_quantity * price_fn(state, point)
            total_invested += invested
            total_current += current
            invested_by_category[category] = invested_by_category.get(category, 0.0) + invested
            current_by_category[category] = current_by_category.get(category, 0.0) + current

        prior_points = len(self.labels)
        self.labels.append(point.label)
        self.invested.append(round_money(total_invested))
        self.current.append(round_money(total_current))

        for category in seen_now:
            if category not in self.categories:
                self.categories[category] = CategorySeries.zeros(prior_points)
        for category, series in self.categories.items():
            if category in invested_by_category:
                series.append(
                    round_money(invested_by_category[category]),
                    round_money(current_by_category[category]),
                )
            else:
                series.append(0.0, 0.0)

    def result(self, start: date, end: date, resolution: str) -> EvolutionSeries:
        return EvolutionSeries(
            start=start,
            end=end,
            resolution=resolution,
            labels=self.labels,
            invested=self.invested,
            current=self.current,
            categories=self.categories,
        )


__all__ = ["SeriesAggregator", "round_money"]
