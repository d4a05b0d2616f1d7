import asyncio
import inspect
import pathlib
import sys
from datetime import date
from itertools import count

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_evolution import Transaction  # noqa: E402

_ids = count(1)


def make_tx(
    symbol: str,
    quantity: float,
    price: float,
    day: date,
    *,
    category: str = "ACAO",
    currency: str | None = "BRL",
    **extra,
) -> Transaction:
    """Build a contribution whose amount defaults to ``|quantity| * price``."""

    return Transaction(
        id=extra.pop("id", f"tx{next(_ids)}"),
        symbol=symbol,
        category=category,
        quantity=quantity,
        unit_price=price,
        amount=extra.pop("amount", abs(quantity) * price),
        currency=currency,
        date=day,
        **extra,
    )


@pytest.fixture
def tx():
    return make_tx


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**pyfuncitem.funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None
