"""Exceptions raised by the evolution engine."""
from __future__ import annotations


class EvolutionError(Exception):
    """Base class for errors surfaced to callers of the engine."""


class SpanTooLargeError(EvolutionError, ValueError):
    """Raised when the requested range exceeds the supported span."""

    def __init__(self, total_days: int, max_days: int):
        super().__init__(
            f"Requested range of {total_days} days exceeds the maximum of {max_days} days (10 years)"
        )
        self.total_days = total_days
        self.max_days = max_days


class InvalidDateError(EvolutionError, ValueError):
    """Raised when a date parameter is not a valid ISO date."""

    def __init__(self, field: str, value: str):
        super().__init__(f"Invalid {field}: {value!r} (expected YYYY-MM-DD)")
        self.field = field
        self.value = value


__all__ = ["EvolutionError", "InvalidDateError", "SpanTooLargeError"]
