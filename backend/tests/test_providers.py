"""HTTP-backed oracle, FX and contribution source tests."""

from __future__ import annotations

from datetime import date, datetime

import httpx
import pytest

from app.providers.fx_rates import FrankfurterRateProvider, static_rates
from app.providers.quote_service import QuoteServiceOracle
from app.services.transactions import (
    PortfolioServiceTransactionSource,
    TransactionSourceError,
    parse_contributions,
)


def _fx(handler=None, **kwargs) -> FrankfurterRateProvider:
    def offline(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    transport = httpx.MockTransport(handler or offline)
    return FrankfurterRateProvider(client=httpx.Client(transport=transport), **kwargs)


def test_quote_request_and_parsing():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "price": 36.4, "currency": "BRL"})

    oracle = QuoteServiceOracle(
        "http://quotes.test/",
        fx=_fx(),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    result = oracle.quote("PETR4", "ACAO", date(2024, 1, 2), datetime(2024, 1, 2, 10, 0))

    assert result.usable
    assert result.price == 36.4
    assert result.currency == "BRL"
    request = seen[0]
    assert request.url.path == "/quotes/PETR4"
    assert request.url.params["category"] == "ACAO"
    assert request.url.params["date"] == "2024-01-02"
    assert request.url.params["datetime"] == "2024-01-02T10:00:00"


def test_current_quote_omits_date():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"price": 10})

    oracle = QuoteServiceOracle("http://quotes.test", fx=_fx(), client=httpx.Client(transport=httpx.MockTransport(handler)))
    assert oracle.quote("BTC", "CRYPTO", None).price == 10.0
    assert "date" not in seen[0].url.params


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"detail": "unknown symbol"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=[1, 2]),
        httpx.Response(200, json={"success": False, "price": 0, "message": "no data"}),
    ],
)
def test_quote_failures_are_not_raised(response):
    oracle = QuoteServiceOracle(
        "http://quotes.test",
        fx=_fx(),
        client=httpx.Client(transport=httpx.MockTransport(lambda request: response)),
    )
    assert not oracle.quote("XPTO3", "ACAO", date(2024, 1, 2)).usable


def test_unreachable_quote_service_is_a_failed_quote():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    oracle = QuoteServiceOracle("http://quotes.test", fx=_fx(), client=httpx.Client(transport=httpx.MockTransport(handler)))
    result = oracle.quote("PETR4", "ACAO", date(2024, 1, 2))
    assert not result.success
    assert "refused" in result.message


def test_frankfurter_rates_are_cached():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"base": "USD", "rates": {"BRL": 5.1}})

    provider = _fx(handler)
    assert provider.rate("usd", "brl") == 5.1
    assert provider.rate("USD", "BRL") == 5.1
    assert len(calls) == 1
    assert calls[0].url.params["from"] == "USD"
    assert calls[0].url.params["to"] == "BRL"
    assert provider.rate("BRL", "BRL") == 1.0


def test_frankfurter_outage_uses_static_rates():
    provider = _fx(fallback=static_rates({"USD": 6.0}, "BRL"))
    assert provider.rate("USD", "BRL") == 6.0
    assert provider.rate("BRL", "USD") == pytest.approx(1 / 6.0)
    with pytest.raises(KeyError):
        provider.rate("JPY", "BRL")


def test_expired_rate_is_reused_when_refresh_fails():
    responses = iter(
        [
            httpx.Response(200, json={"rates": {"BRL": 5.0}}),
            httpx.Response(500),
        ]
    )
    provider = _fx(lambda request: next(responses), cache_ttl_seconds=0)
    assert provider.rate("USD", "BRL") == 5.0
    assert provider.rate("USD", "BRL") == 5.0


def test_oracle_exchange_rate_and_accrual():
    oracle = QuoteServiceOracle(
        "http://quotes.test",
        fx=_fx(fallback=static_rates({"USD": 5.0}, "BRL")),
        index_rates={"CDI": 10.0},
        client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503))),
    )
    assert oracle.exchange_rate("USD", "BRL") == 5.0
    value = oracle.fixed_income_value(
        1000.0, "LCA", "POS_FIXADO", "CDI", 100.0, None, date(2024, 1, 1), date(2025, 1, 1), date(2024, 1, 11)
    )
    assert value == pytest.approx(1000.0 * (1 + 0.10 / 252) ** 10)


async def test_contributions_are_loaded_with_service_headers():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "investments": [
                    {
                        "id": "1",
                        "symbol": "PETR4",
                        "category": "ACAO",
                        "quantity": 10,
                        "unitPrice": 30.5,
                        "amount": 305,
                        "currency": "brl",
                        "date": "2024-01-02",
                    },
                    {
                        "id": "2",
                        "symbol": "CDB Banco X",
                        "category": "RENDA_FIXA",
                        "quantity": 1,
                        "amount": 1000,
                        "date": "2024-01-03",
                        "yieldType": "POS_FIXADO",
                        "referenceIndex": "CDI",
                        "indexPercentage": 110,
                        "maturityDate": "2026-01-03",
                    },
                    {"id": "3", "symbol": "BROKEN", "quantity": "lots", "date": "someday"},
                ]
            },
        )

    source = PortfolioServiceTransactionSource(
        "http://portfolio.test/", token="secret", transport=httpx.MockTransport(handler)
    )
    transactions = await source.fetch("user-9")

    assert [tx.id for tx in transactions] == ["1", "2"]
    assert transactions[0].unit_price == 30.5
    assert transactions[0].currency == "BRL"
    assert transactions[1].is_fixed_income
    assert transactions[1].index_percentage == 110
    assert transactions[1].maturity_date == date(2026, 1, 3)
    assert seen[0].url.path == "/investments"
    assert seen[0].headers["X-User-Id"] == "user-9"
    assert seen[0].headers["X-Internal-Token"] == "secret"


async def test_portfolio_service_errors_raise():
    source = PortfolioServiceTransactionSource(
        "http://portfolio.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, json={"detail": "maintenance"})),
    )
    with pytest.raises(TransactionSourceError, match="maintenance"):
        await source.fetch("user-9")


def test_parse_contributions_accepts_bare_lists():
    transactions = parse_contributions(
        [{"id": "a", "symbol": "BTC", "category": "CRYPTO", "quantity": 0.5, "amount": 100, "date": "2024-02-01"}]
    )
    assert transactions[0].contribution_amount == 100
    with pytest.raises(TransactionSourceError):
        parse_contributions({"investments": "nope"})


def test_numeric_ids_are_accepted():
    transactions = parse_contributions(
        [{"id": 7, "symbol": "PETR4", "category": "ACAO", "quantity": 10, "amount": 300, "date": "2024-01-01"}]
    )
    assert [tx.id for tx in transactions] == ["7"]


@pytest.mark.parametrize("field", ["amount", "unitPrice", "indexPercentage", "fixedRate"])
@pytest.mark.parametrize("value", ["NaN", "inf", "-Infinity"])
def test_non_finite_numbers_are_rejected(field, value, caplog):
    item = {"id": "x", "symbol": "PETR4", "category": "ACAO", "quantity": 10, "amount": 300, "date": "2024-01-01"}
    item[field] = value

    with caplog.at_level("WARNING"):
        assert parse_contributions([item]) == []
    assert "Skipping malformed contribution" in caplog.text
