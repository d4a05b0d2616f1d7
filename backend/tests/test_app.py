"""Application wiring tests."""

from __future__ import annotations

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import AppSettings, get_settings
from app.core.telemetry import setup_telemetry


async def test_health_reports_base_currency():
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["base_currency"] == get_settings().base_currency


def test_evolution_route_is_registered():
    from app.main import app

    paths = {route.path for route in app.routes}
    assert "/investments/evolution" in paths


def test_settings_overrides_and_redaction():
    settings = AppSettings(base_currency="USD", portfolio_service_token="s3cret", prefetch_max_lookups_per_asset=20)

    assert settings.base_currency == "USD"
    assert settings.prefetch_max_lookups_per_asset == 20
    assert settings.dict_for_logging()["portfolio_service_token"] == "***"
    assert settings.index_rates["CDI"] > 0


def test_telemetry_disabled_by_default():
    assert setup_telemetry(FastAPI(), AppSettings(telemetry_enabled=False)) is False
