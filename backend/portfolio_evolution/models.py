"""Domain models used by the investment evolution engine."""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Deque, Dict, List, Optional

FIXED_INCOME_CATEGORY = "RENDA_FIXA"
DEFAULT_CATEGORY = "OUTROS"
UNKNOWN_SYMBOL = "DESCONHECIDO"
LAYER_EPSILON = 1e-6


@dataclass(frozen=True)
class Transaction:
    """A single contribution (buy or sell) against an asset."""

    id: str
    symbol: str
    category: str
    quantity: float
    unit_price: float
    date: date
    amount: float = 0.0
    currency: Optional[str] = None
    instrument_type: Optional[str] = None
    yield_type: Optional[str] = None
    reference_index: Optional[str] = None
    index_percentage: Optional[float] = None
    fixed_rate: Optional[float] = None
    maturity_date: Optional[date] = None

    @property
    def is_valid(self) -> bool:
        """Return ``False`` for zero, NaN or infinite quantities."""

        qty = self.quantity
        return qty != 0 and not math.isnan(qty) and not math.isinf(qty)

    @property
    def contribution_amount(self) -> float:
        """Return ``|amount|``, or ``|quantity| * unit_price`` when the amount is missing or not finite."""

        if self.amount and math.isfinite(self.amount):
            return abs(self.amount)
        return abs(self.quantity) * self.unit_price

    @property
    def normalized_category(self) -> str:
        return self.category or DEFAULT_CATEGORY

    @property
    def normalized_symbol(self) -> str:
        return self.symbol or UNKNOWN_SYMBOL

    @property
    def is_fixed_income(self) -> bool:
        return self.normalized_category.upper() == FIXED_INCOME_CATEGORY


@dataclass
class PositionLayer:
    """An open acquisition lot."""

    remaining_quantity: float
    unit_cost: float
    acquisition_date: date
    original_amount: float

    @property
    def cost_total(self) -> float:
        return self.remaining_quantity * self.unit_cost


@dataclass
class AssetState:
    """Aggregate position for one (category, symbol) or fixed-income instrument."""

    symbol: str
    category: str
    currency: Optional[str] = None
    instrument_type: Optional[str] = None
    yield_type: Optional[str] = None
    reference_index: Optional[str] = None
    index_percentage: Optional[float] = None
    fixed_rate: Optional[float] = None
    maturity_date: Optional[date] = None
    layers: Deque[PositionLayer] = field(default_factory=deque)
    last_known_price: float = 0.0
    first_transaction_date: Optional[date] = None
    last_transaction_date: Optional[date] = None

    @classmethod
    def from_transaction(cls, tx: Transaction) -> "AssetState":
        state = cls(symbol=tx.normalized_symbol, category=tx.normalized_category)
        state.update_metadata(tx)
        return state

    def update_metadata(self, tx: Transaction) -> None:
        """Overwrite metadata with the most recent transaction's values."""

        if tx.currency is not None:
            self.currency = tx.currency
        self.instrument_type = tx.instrument_type
        self.yield_type = tx.yield_type
        self.reference_index = tx.reference_index
        self.index_percentage = tx.index_percentage
        self.fixed_rate = tx.fixed_rate
        if tx.maturity_date is not None:
            self.maturity_date = tx.maturity_date
        if self.first_transaction_date is None:
            self.first_transaction_date = tx.date
        self.last_transaction_date = tx.date

    @property
    def is_fixed_income(self) -> bool:
        return self.category.upper() == FIXED_INCOME_CATEGORY

    @property
    def is_empty(self) -> bool:
        return not self.layers

    @property
    def total_quantity(self) -> float:
        return sum(layer.remaining_quantity for layer in self.layers)

    @property
    def total_cost_basis(self) -> float:
        return sum(layer.cost_total for layer in self.layers)

    @property
    def average_cost(self) -> float:
        qty = self.total_quantity
        if qty <= 0:
            return 0.0
        return self.total_cost_basis / qty


@dataclass(frozen=True)
class SamplePoint:
    """A labelled instant at which the portfolio is valued."""

    label: str
    on: date
    moment: Optional[datetime] = None


@dataclass(frozen=True)
class TimeAxis:
    start: date
    end: date
    total_days: int
    points: List[SamplePoint]
    day_step: int
    price_interval: int
    resolution: str
    show_year: bool


@dataclass
class CategorySeries:
    invested: List[float] = field(default_factory=list)
    current: List[float] = field(default_factory=list)

    @classmethod
    def zeros(cls, length: int) -> "CategorySeries":
        return cls(invested=[0.0] * length, current=[0.0] * length)

    def append(self, invested: float, current: float) -> None:
        self.invested.append(invested)
        self.current.append(current)

    def __len__(self) -> int:
        return len(self.invested)


@dataclass
class EvolutionSeries:
    """Reconstructed invested/current value series for a date range."""

    start: date
    end: date
    resolution: str
    labels: List[str] = field(default_factory=list)
    invested: List[float] = field(default_factory=list)
    current: List[float] = field(default_factory=list)
    categories: Dict[str, CategorySeries] = field(default_factory=dict)

    @property
    def points(self) -> int:
        return len(self.labels)

    def to_payload(self) -> dict:
        """Return the JSON-ready payload exposed by the API."""

        return {
            "labels": list(self.labels),
            "invested": list(self.invested),
            "current": list(self.current),
            "categories": {
                name: {"invested": list(series.invested), "current": list(series.current)}
                for name, series in self.categories.items()
            },
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
            "resolution": self.resolution,
            "points": self.points,
        }
