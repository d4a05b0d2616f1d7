"""Portfolio valuation and time-series reconstruction engine."""

from .errors import EvolutionError, InvalidDateError, SpanTooLargeError
from .evolution import PERIODS, build_evolution_series, resolve_date_range
from .fx import FXRateProvider
from .ledger import PositionLedger
from .models import AssetState, CategorySeries, EvolutionSeries, PositionLayer, Transaction
from .oracle import InMemoryPriceOracle, PriceOracle, QuoteResult

__all__ = [
    "AssetState",
    "CategorySeries",
    "EvolutionError",
    "EvolutionSeries",
    "FXRateProvider",
    "InMemoryPriceOracle",
    "InvalidDateError",
    "PERIODS",
    "PositionLayer",
    "PositionLedger",
    "PriceOracle",
    "QuoteResult",
    "SpanTooLargeError",
    "Transaction",
    "build_evolution_series",
    "resolve_date_range",
]
