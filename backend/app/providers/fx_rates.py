"""Exchange-rate provider backed by the Frankfurter API."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Mapping

import httpx

from portfolio_evolution.fx import FXRateProvider

logger = logging.getLogger(__name__)


class RateProviderUnavailable(RuntimeError):
    """Raised when live rates cannot be fetched."""


@dataclass(frozen=True)
class CachedRate:
    rate: float
    expires_at: float


def static_rates(fallback_rates: Mapping[str, float], base_currency: str) -> FXRateProvider:
    """Build a static table from ``{currency: units of base per unit}``."""

    base = base_currency.upper()
    return FXRateProvider({(code.upper(), base): rate for code, rate in fallback_rates.items()})


class FrankfurterRateProvider:
    """Latest rates with a TTL cache; stale or static rates when the API fails."""

    def __init__(
        self,
        *,
        base_url: str = "https://api.frankfurter.app",
        cache_ttl_seconds: int = 60 * 60,
        fallback: FXRateProvider | None = None,
        timeout_seconds: float = 8.0,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_ttl_seconds = cache_ttl_seconds
        self.fallback = fallback or FXRateProvider()
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._cache: dict[tuple[str, str], CachedRate] = {}

    def rate(self, from_currency: str, to_currency: str) -> float:
        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return 1.0

        key = (source, target)
        cached = self._cache.get(key)
        now = time.monotonic()
        if cached and cached.expires_at > now:
            return cached.rate

        try:
            rate = self._fetch(source, target)
        except RateProviderUnavailable as exc:
            if cached:
                logger.warning("Using stale %s->%s rate: %s", source, target, exc)
                return cached.rate
            logger.warning("Falling back to static %s->%s rate: %s", source, target, exc)
            return self.fallback.rate(source, target)

        self._cache[key] = CachedRate(rate=rate, expires_at=now + self.cache_ttl_seconds)
        return rate

    def _fetch(self, source: str, target: str) -> float:
        url = f"{self.base_url}/latest"
        try:
            response = self._client.get(url, params={"from": source, "to": target})
        except httpx.HTTPError as exc:
            raise RateProviderUnavailable(f"Frankfurter API unavailable: {exc}") from exc
        if response.status_code >= 400:
            raise RateProviderUnavailable(f"Frankfurter API error {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise RateProviderUnavailable("Frankfurter returned invalid JSON") from exc
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict) or target not in rates:
            raise RateProviderUnavailable(f"Frankfurter response missing {target} rate")
        return float(rates[target])

    def close(self) -> None:
        self._client.close()


__all__ = ["FrankfurterRateProvider", "RateProviderUnavailable", "static_rates"]
