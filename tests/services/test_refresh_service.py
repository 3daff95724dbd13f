"""Tests for the concurrent portfolio price refresh."""

import datetime as dt
from decimal import Decimal

import pytest

from networth.schemas.quote import Quote
from networth.schemas.transaction import Transaction
from networth.services.portfolio_calculations import derive_holdings
from networth.services.refresh_service import apply_quote, distinct_symbols, refresh_portfolio


def make_tx(tx_id: str, symbol: str, side: str, quantity: str, price: str, exchange="NSE"):
    return Transaction(
        id=tx_id,
        symbol=symbol,
        name=symbol.title(),
        type=side,
        quantity=Decimal(quantity),
        price=Decimal(price),
        date=dt.date(2024, 3, 1),
        exchange=exchange,
    )


@pytest.fixture
def ledger() -> list[Transaction]:
    return [
        make_tx("1", "TCS", "BUY", "10", "100"),
        make_tx("2", "INFY", "BUY", "5", "200", exchange="BSE"),
        make_tx("3", "AAPL", "BUY", "2", "150", exchange="NASDAQ"),
        make_tx("4", "TCS", "BUY", "10", "200"),
    ]


@pytest.mark.unit
def test_distinct_symbols_keep_first_exchange():
    transactions = [
        make_tx("1", "TCS", "BUY", "1", "1", exchange="BSE"),
        make_tx("2", "INFY", "BUY", "1", "1"),
        make_tx("3", "TCS", "BUY", "1", "1", exchange="NSE"),
    ]

    assert distinct_symbols(transactions) == {"TCS": "BSE", "INFY": "NSE"}


@pytest.mark.unit
def test_apply_quote_returns_new_holding():
    holding = derive_holdings([make_tx("1", "TCS", "BUY", "10", "100")])[0]
    quote = Quote(
        symbol="TCS",
        price=Decimal("120"),
        change=Decimal("2"),
        change_percent=Decimal("1.69"),
        timestamp=dt.datetime.now(dt.UTC),
    )

    refreshed = apply_quote(holding, quote)

    assert refreshed is not holding
    assert holding.last_traded_price == Decimal("100")
    assert refreshed.last_traded_price == Decimal("120")
    assert refreshed.current_value == Decimal("1200")
    assert refreshed.profit_loss == Decimal("200")
    assert refreshed.profit_loss_percent == Decimal("20")
    # Day change is the per-share move reported by the quote
    assert refreshed.day_change == Decimal("2")
    assert refreshed.day_change_percent == Decimal("1.69")
    assert refreshed.average_cost == holding.average_cost


@pytest.mark.unit
async def test_refresh_with_one_failing_symbol(ledger, quote_provider, caplog):
    """A failed quote leaves that holding at its ledger-derived price."""
    quote_provider.prices = {"TCS": Decimal("210"), "AAPL": Decimal("180")}
    quote_provider.failing = {"INFY"}

    result = await refresh_portfolio(ledger, quote_provider)

    assert len(result.holdings) == 3
    by_symbol = {h.symbol: h for h in result.holdings}
    assert by_symbol["TCS"].current_value == Decimal("4200")
    assert by_symbol["AAPL"].current_value == Decimal("360")
    assert by_symbol["INFY"].last_traded_price == Decimal("200")
    assert by_symbol["INFY"].current_value == Decimal("1000")

    assert result.refreshed_symbols == ["TCS", "AAPL"]
    assert result.failed_symbols == ["INFY"]
    assert result.metrics.total_value == Decimal("5560")
    assert "INFY" in caplog.text


@pytest.mark.unit
async def test_refresh_requests_each_symbol_once(ledger, quote_provider):
    quote_provider.prices = {"TCS": Decimal("1"), "INFY": Decimal("1"), "AAPL": Decimal("1")}

    await refresh_portfolio(ledger, quote_provider)

    assert sorted(quote_provider.requested) == [
        ("AAPL", "NASDAQ"),
        ("INFY", "BSE"),
        ("TCS", "NSE"),
    ]


@pytest.mark.unit
async def test_refresh_survives_unexpected_errors(ledger):
    class BrokenProvider:
        async def get_quote(self, symbol, exchange=None):
            raise RuntimeError("connection reset")

        async def refresh_all_data(self):
            return None

    result = await refresh_portfolio(ledger, BrokenProvider())

    assert result.refreshed_symbols == []
    assert result.failed_symbols == ["TCS", "INFY", "AAPL"]
    assert result.holdings == derive_holdings(ledger)


@pytest.mark.unit
async def test_refresh_empty_ledger(quote_provider):
    result = await refresh_portfolio([], quote_provider)

    assert result.holdings == []
    assert result.metrics.total_value == 0
    assert quote_provider.requested == []
