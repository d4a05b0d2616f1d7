"""Investment evolution endpoint."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from opentelemetry import trace

from app.api.dependencies.providers import get_app_settings, get_price_oracle, get_transaction_source
from app.config import AppSettings
from app.schemas import EvolutionResponse
from app.services.transactions import TransactionSource, TransactionSourceError
from portfolio_evolution import PERIODS, EvolutionError, PriceOracle, build_evolution_series

router = APIRouter()
logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@router.get("/evolution", response_model=EvolutionResponse)
async def get_evolution(
    user_id: str = Query(..., alias="userId", min_length=1),
    start_date: str | None = Query(default=None, alias="startDate", description="ISO date (YYYY-MM-DD)"),
    end_date: str | None = Query(default=None, alias="endDate", description="ISO date (YYYY-MM-DD)"),
    period: str | None = Query(default=None, description=f"One of {', '.join(PERIODS)}"),
    source: TransactionSource = Depends(get_transaction_source),
    oracle: PriceOracle = Depends(get_price_oracle),
    settings: AppSettings = Depends(get_app_settings),
) -> EvolutionResponse:
    """Return invested vs. current portfolio value over the requested range."""

    try:
        transactions = await source.fetch(user_id)
    except TransactionSourceError as exc:
        logger.error("Could not load contributions for user %s: %s", user_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    with tracer.start_as_current_span("investment_evolution.build") as span:
        span.set_attribute("enduser.id", user_id)
        span.set_attribute("evolution.transactions", len(transactions))
        if period:
            span.set_attribute("evolution.period", period)
        try:
            series = await asyncio.to_thread(
                build_evolution_series,
                transactions,
                oracle,
                start=start_date,
                end=end_date,
                period=period,
                base_currency=settings.base_currency,
                max_lookups_per_asset=settings.prefetch_max_lookups_per_asset,
                pause_every=settings.prefetch_pause_every,
                pause_seconds=settings.prefetch_pause_seconds,
            )
        except EvolutionError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        except Exception as exc:
            logger.exception("Failed to compute investment evolution for user %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to compute investment evolution",
            ) from exc
        span.set_attribute("evolution.points", series.points)

    return EvolutionResponse.from_series(series)


__all__ = ["router"]
