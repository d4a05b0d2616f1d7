"""Loads a user's investment contributions from the portfolio service."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx
from opentelemetry.propagate import inject
from pydantic import ValidationError

from app.schemas import ContributionSchema
from portfolio_evolution import Transaction

logger = logging.getLogger(__name__)


class TransactionSourceError(RuntimeError):
    """Raised when contributions cannot be loaded."""


class TransactionSource(Protocol):
    async def fetch(self, user_id: str) -> list[Transaction]:
        ...


def parse_contributions(payload: Any) -> list[Transaction]:
    """Convert a service payload into transactions, skipping malformed items."""

    items: Any
    if isinstance(payload, dict):
        items = payload.get("investments", payload.get("data", []))
    else:
        items = payload
    if not isinstance(items, list):
        raise TransactionSourceError("Portfolio service response is not a list of contributions")

    transactions: list[Transaction] = []
    for item in items:
        try:
            transactions.append(ContributionSchema.model_validate(item).to_transaction())
        except ValidationError as exc:
            logger.warning("Skipping malformed contribution %r: %s", item, exc.errors())
    return transactions


class PortfolioServiceTransactionSource:
    """HTTP client for ``GET /investments`` on the portfolio service."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def fetch(self, user_id: str) -> list[Transaction]:
        url = f"{self.base_url}/investments"
        headers: dict[str, str] = {"X-User-Id": str(user_id)}
        if self.token:
            headers["X-Internal-Token"] = self.token
        # Inject current trace context so downstream spans link to this request
        inject(headers)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise TransactionSourceError(f"Failed to reach portfolio service: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("Portfolio service error %s for %s", response.status_code, url)
            detail: Any
            try:
                payload = response.json()
                detail = payload.get("detail", payload) if isinstance(payload, dict) else payload
            except ValueError:
                detail = response.text
            raise TransactionSourceError(f"Portfolio service error {response.status_code}: {detail}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransactionSourceError("Portfolio service returned invalid JSON payload") from exc
        return parse_contributions(payload)


__all__ = [
    "PortfolioServiceTransactionSource",
    "TransactionSource",
    "TransactionSourceError",
    "parse_contributions",
]
