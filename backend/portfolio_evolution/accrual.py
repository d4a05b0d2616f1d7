"""Closed-form accrual for fixed-income contributions.

Rates are annual percentages compounded over a 252 business-day year. Gains
are taxed with the regressive income-tax table unless the instrument type is
exempt (LCI/LCA).
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Mapping

BUSINESS_DAYS_PER_YEAR = 252
DEFAULT_INDEX_PERCENTAGE = 100.0
UNKNOWN_INDEX_RATE = 10.0
TAX_EXEMPT_INSTRUMENTS = frozenset({"LCI", "LCA"})

DEFAULT_INDEX_RATES: dict[str, float] = {
    "SELIC": 10.5,
    "CDI": 10.35,
    "IPCA": 4.62,
    "PRE": 12.0,
}


class YieldType(str, Enum):
    PRE_FIXED = "PRE_FIXADO"
    POST_FIXED = "POS_FIXADO"
    POST_FIXED_PLUS_RATE = "POS_FIXADO_TAXA"


def income_tax_rate(days: int) -> float:
    """Return the regressive income-tax percentage for a holding period."""

    if days <= 180:
        return 22.5
    if days <= 360:
        return 20.0
    if days <= 720:
        return 17.5
    return 15.0


def index_rate(reference_index: str | None, index_rates: Mapping[str, float] | None = None) -> float:
    if reference_index is None:
        return 0.0
    rates = DEFAULT_INDEX_RATES if index_rates is None else index_rates
    return float(rates.get(reference_index.upper(), UNKNOWN_INDEX_RATE))


def annual_rate(
    yield_type: str | None,
    reference_index: str | None,
    index_percentage: float | None,
    fixed_rate: float | None,
    index_rates: Mapping[str, float] | None = None,
) -> float:
    """Return the effective annual percentage for the given yield parameters."""

    if yield_type == YieldType.PRE_FIXED.value:
        return fixed_rate or 0.0
    if yield_type in (YieldType.POST_FIXED.value, YieldType.POST_FIXED_PLUS_RATE.value):
        percentage = index_percentage if index_percentage is not None else DEFAULT_INDEX_PERCENTAGE
        rate = index_rate(reference_index, index_rates) * (percentage / 100.0)
        if yield_type == YieldType.POST_FIXED_PLUS_RATE.value and fixed_rate is not None:
            rate += fixed_rate
        return rate
    return 0.0


def accrue(
    principal: float,
    instrument_type: str | None,
    yield_type: str | None,
    reference_index: str | None,
    index_percentage: float | None,
    fixed_rate: float | None,
    start: date | None,
    maturity: date | None,
    as_of: date,
    index_rates: Mapping[str, float] | None = None,
) -> float:
    """Return the net value of ``principal`` on ``as_of``.

    Growth stops at maturity. Without a start or maturity date, or for a
    non-positive term, the principal is returned unchanged.
    """

    if start is None or maturity is None:
        return principal
    final = as_of if as_of < maturity else maturity
    total_days = (maturity - start).days
    elapsed_days = (final - start).days
    if total_days <= 0 or elapsed_days < 0:
        return principal

    rate = annual_rate(yield_type, reference_index, index_percentage, fixed_rate, index_rates)
    daily = rate / 100.0 / BUSINESS_DAYS_PER_YEAR
    gross = principal * (1 + daily) ** elapsed_days
    gain = gross - principal

    if gain > 0 and (instrument_type or "").upper() not in TAX_EXEMPT_INSTRUMENTS:
        gain -= gain * income_tax_rate(elapsed_days) / 100.0
    return principal + gain


__all__ = [
    "DEFAULT_INDEX_RATES",
    "YieldType",
    "accrue",
    "annual_rate",
    "income_tax_rate",
    "index_rate",
]
