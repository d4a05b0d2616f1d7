"""FX conversion helpers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass
class FXRateProvider:
    """Static conversion table keyed by ``(from_currency, to_currency)``.

    A missing direct pair is answered with the inverse of the opposite pair.
    """

    rates: Dict[Tuple[str, str], float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.rates = {
            (source.upper(), target.upper()): float(rate)
            for (source, target), rate in self.rates.items()
        }

    def rate(self, from_currency: str, to_currency: str) -> float:
        """Return the multiplier converting ``from_currency`` into ``to_currency``."""

        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return 1.0
        direct = self.rates.get((source, target))
        if direct:
            return direct
        inverse = self.rates.get((target, source))
        if inverse:
            return 1.0 / inverse
        raise KeyError(f"Missing FX rate for {source}->{target}")
