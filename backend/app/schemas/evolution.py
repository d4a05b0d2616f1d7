"""Pydantic schemas for contributions and the evolution payload."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from portfolio_evolution import EvolutionSeries, Transaction


class ContributionSchema(BaseModel):
    """A contribution record as served by the portfolio service."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | int = Field(examples=["42"])
    symbol: str | None = Field(default=None, examples=["PETR4"])
    category: str | None = Field(default=None, examples=["ACAO"])
    quantity: float = Field(examples=[10])
    unit_price: float = Field(default=0.0, alias="unitPrice", allow_inf_nan=False, examples=[30.5])
    amount: float = Field(
        default=0.0,
        allow_inf_nan=False,
        description="Contribution amount in transaction currency",
        examples=[305.0],
    )
    currency: str | None = Field(default=None, min_length=3, max_length=3, examples=["BRL"])
    date: dt.date = Field(examples=["2024-01-02"])
    instrument_type: str | None = Field(default=None, alias="instrumentType", examples=["CDB"])
    yield_type: str | None = Field(default=None, alias="yieldType", examples=["POS_FIXADO"])
    reference_index: str | None = Field(default=None, alias="referenceIndex", examples=["CDI"])
    index_percentage: float | None = Field(
        default=None, alias="indexPercentage", allow_inf_nan=False, examples=[110.0]
    )
    fixed_rate: float | None = Field(default=None, alias="fixedRate", allow_inf_nan=False, examples=[12.5])
    maturity_date: dt.date | None = Field(default=None, alias="maturityDate", examples=["2026-01-02"])

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=str(self.id),
            symbol=self.symbol or "",
            category=self.category or "",
            quantity=self.quantity,
            unit_price=self.unit_price,
            amount=self.amount,
            currency=self.currency.upper() if self.currency else None,
            date=self.date,
            instrument_type=self.instrument_type,
            yield_type=self.yield_type,
            reference_index=self.reference_index,
            index_percentage=self.index_percentage,
            fixed_rate=self.fixed_rate,
            maturity_date=self.maturity_date,
        )


class CategorySeriesSchema(BaseModel):
    invested: list[float]
    current: list[float]


class EvolutionResponse(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "labels": ["01/01", "02/01"],
                "invested": [1000.0, 1000.0],
                "current": [1000.0, 1012.5],
                "categories": {"ACAO": {"invested": [1000.0, 1000.0], "current": [1000.0, 1012.5]}},
                "startDate": "2024-01-01",
                "endDate": "2024-01-02",
                "resolution": "1d",
                "points": 2,
            }
        },
    )

    labels: list[str]
    invested: list[float]
    current: list[float]
    categories: dict[str, CategorySeriesSchema]
    start_date: dt.date = Field(alias="startDate")
    end_date: dt.date = Field(alias="endDate")
    resolution: str
    points: int

    @classmethod
    def from_series(cls, series: EvolutionSeries) -> "EvolutionResponse":
        return cls.model_validate(series.to_payload())


__all__ = ["CategorySeriesSchema", "ContributionSchema", "EvolutionResponse"]
