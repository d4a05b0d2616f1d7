"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .evolution import router as evolution_router

api_router = APIRouter()
api_router.include_router(evolution_router, prefix="/investments", tags=["investments"])

__all__ = ["api_router"]
