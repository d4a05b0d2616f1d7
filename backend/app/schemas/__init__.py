"""Pydantic schema exports."""

from .evolution import CategorySeriesSchema, ContributionSchema, EvolutionResponse

__all__ = [
    "CategorySeriesSchema",
    "ContributionSchema",
    "EvolutionResponse",
]
