"""Tests for holdings derivation and portfolio metrics."""

import datetime as dt
import itertools
from decimal import Decimal

import pytest

from networth.core.constants import LEGACY_MIGRATION_NOTE
from networth.schemas.portfolio import LegacyStock, PortfolioMetrics
from networth.schemas.transaction import Transaction, TransactionType
from networth.services.portfolio_calculations import (
    compute_metrics,
    derive_holdings,
    is_stale,
    migrate_legacy_stocks,
    percent_of,
)

_ids = itertools.count(1)


def tx(
    symbol: str,
    side: str,
    quantity: str,
    price: str,
    exchange: str = "NSE",
) -> Transaction:
    return Transaction(
        id=f"tx-{next(_ids)}",
        symbol=symbol,
        name=f"{symbol} Ltd",
        type=TransactionType(side),
        quantity=Decimal(quantity),
        price=Decimal(price),
        date=dt.date(2024, 1, 15),
        exchange=exchange,
    )


@pytest.mark.unit
class TestDeriveHoldings:
    """Tests for the ledger fold."""

    def test_empty_ledger(self):
        assert derive_holdings([]) == []

    def test_weighted_average_cost(self):
        """Two buys at different prices average by quantity."""
        holdings = derive_holdings([tx("TCS", "BUY", "10", "100"), tx("TCS", "BUY", "10", "200")])

        assert len(holdings) == 1
        holding = holdings[0]
        assert holding.total_quantity == Decimal("20")
        assert holding.average_cost == Decimal("150")
        assert holding.last_traded_price == Decimal("200")
        assert holding.current_value == Decimal("4000")
        assert holding.profit_loss == Decimal("1000")
        assert holding.profit_loss_percent == Decimal("1000") / Decimal("3000") * 100

    def test_partial_sell_keeps_average_cost(self):
        holdings = derive_holdings(
            [
                tx("INFY", "BUY", "10", "100"),
                tx("INFY", "BUY", "10", "200"),
                tx("INFY", "SELL", "5", "250"),
            ]
        )

        holding = holdings[0]
        assert holding.total_quantity == Decimal("15")
        assert holding.average_cost == Decimal("150")
        assert holding.last_traded_price == Decimal("250")
        assert holding.current_value == Decimal("3750")

    def test_closed_position_is_omitted(self):
        holdings = derive_holdings([tx("TCS", "BUY", "10", "100"), tx("TCS", "SELL", "10", "120")])

        assert holdings == []

    def test_buy_after_close_starts_fresh(self):
        """Closing a position resets the average cost for the next buy."""
        holdings = derive_holdings(
            [
                tx("TCS", "BUY", "10", "100"),
                tx("TCS", "SELL", "10", "120"),
                tx("TCS", "BUY", "4", "300"),
            ]
        )

        assert len(holdings) == 1
        assert holdings[0].total_quantity == Decimal("4")
        assert holdings[0].average_cost == Decimal("300")

    def test_oversell_is_clamped(self):
        holdings = derive_holdings(
            [
                tx("TCS", "BUY", "5", "100"),
                tx("TCS", "SELL", "8", "110"),
                tx("TCS", "BUY", "2", "90"),
            ]
        )

        assert holdings[0].total_quantity == Decimal("2")
        assert holdings[0].average_cost == Decimal("90")

    def test_sell_without_buy_yields_nothing(self):
        assert derive_holdings([tx("HDFC", "SELL", "3", "1500")]) == []

    def test_never_yields_non_positive_quantity(self):
        ledger = [
            tx("A", "BUY", "3", "10"),
            tx("B", "SELL", "1", "10"),
            tx("A", "SELL", "5", "12"),
            tx("C", "BUY", "1", "50"),
            tx("B", "BUY", "2", "11"),
            tx("C", "SELL", "1", "55"),
        ]

        holdings = derive_holdings(ledger)

        assert all(h.total_quantity > 0 for h in holdings)
        assert [h.symbol for h in holdings] == ["B"]

    def test_first_seen_symbol_order(self):
        holdings = derive_holdings(
            [
                tx("WIPRO", "BUY", "1", "400"),
                tx("TCS", "BUY", "1", "3800"),
                tx("WIPRO", "BUY", "1", "420"),
                tx("INFY", "BUY", "1", "1500"),
            ]
        )

        assert [h.symbol for h in holdings] == ["WIPRO", "TCS", "INFY"]

    def test_metadata_comes_from_first_transaction(self):
        first = tx("RELIANCE", "BUY", "1", "2500", exchange="BSE")
        second = tx("RELIANCE", "BUY", "1", "2600", exchange="NSE")

        holding = derive_holdings([first, second])[0]

        assert holding.exchange == "BSE"
        assert holding.name == "RELIANCE Ltd"
        assert [t.id for t in holding.transactions] == [first.id, second.id]

    def test_zero_cost_position_has_zero_percent(self):
        holding = derive_holdings([tx("BONUS", "BUY", "10", "0")])[0]

        assert holding.profit_loss == Decimal("0")
        assert holding.profit_loss_percent == Decimal("0")

    def test_day_change_starts_at_zero(self):
        holding = derive_holdings([tx("TCS", "BUY", "1", "100")])[0]

        assert holding.day_change == 0
        assert holding.day_change_percent == 0

    def test_deterministic(self):
        ledger = [tx("TCS", "BUY", "3", "101.5"), tx("INFY", "BUY", "7", "99.25")]

        assert derive_holdings(ledger) == derive_holdings(ledger)


@pytest.mark.unit
class TestComputeMetrics:
    """Tests for portfolio totals."""

    def test_empty_holdings_are_all_zero(self):
        assert compute_metrics([]) == PortfolioMetrics()

    def test_totals(self):
        holdings = derive_holdings(
            [
                tx("TCS", "BUY", "10", "100"),
                tx("TCS", "BUY", "10", "200"),
                tx("INFY", "BUY", "5", "100"),
                tx("INFY", "SELL", "1", "80"),
            ]
        )

        metrics = compute_metrics(holdings)

        # TCS: 20 x 200 = 4000 on cost 3000; INFY: 4 x 80 = 320 on cost 400
        assert metrics.total_value == Decimal("4320")
        assert metrics.total_cost == Decimal("3400")
        assert metrics.total_gain_loss == Decimal("920")
        assert metrics.total_gain_loss_percentage == Decimal("920") / Decimal("3400") * 100
        assert metrics.day_change == 0
        assert metrics.day_change_percentage == 0

    def test_idempotent(self):
        holdings = derive_holdings([tx("TCS", "BUY", "10", "100")])

        assert compute_metrics(holdings) == compute_metrics(holdings)


@pytest.mark.unit
def test_percent_of_zero_base():
    assert percent_of(Decimal("50"), Decimal("0")) == 0
    assert percent_of(Decimal("50"), Decimal("200")) == Decimal("25")


@pytest.mark.unit
def test_migrate_legacy_stocks():
    """Legacy positions become BUY transactions in INR."""
    stocks = [
        LegacyStock(
            id="legacy-1",
            symbol="tcs",
            name="TCS",
            shares=Decimal("10"),
            purchase_price=Decimal("3200"),
            purchase_date=dt.date(2022, 6, 1),
            currency="USD",
        ),
        LegacyStock(
            symbol="INFY",
            name="Infosys",
            shares=Decimal("4"),
            purchase_price=Decimal("1400"),
            purchase_date=dt.date(2023, 2, 1),
            exchange="BSE",
        ),
    ]

    transactions = migrate_legacy_stocks(stocks)

    assert [t.symbol for t in transactions] == ["TCS", "INFY"]
    assert all(t.type == TransactionType.BUY for t in transactions)
    assert all(t.currency == "INR" for t in transactions)
    assert all(t.notes == LEGACY_MIGRATION_NOTE for t in transactions)
    assert transactions[0].id == "legacy-1"
    assert transactions[1].id
    assert transactions[1].exchange == "BSE"
    assert transactions[0].quantity == Decimal("10")
    assert transactions[0].price == Decimal("3200")


@pytest.mark.unit
class TestIsStale:
    """Tests for the staleness flag."""

    def test_never_refreshed(self):
        assert is_stale(None, 1.0) is True

    def test_recent_refresh(self):
        now = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)
        assert is_stale(now - dt.timedelta(minutes=30), 1.0, now=now) is False

    def test_old_refresh(self):
        now = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)
        assert is_stale(now - dt.timedelta(hours=2), 1.0, now=now) is True

    def test_naive_timestamp_is_treated_as_utc(self):
        now = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)
        assert is_stale(dt.datetime(2024, 5, 1, 11, 30), 1.0, now=now) is False
