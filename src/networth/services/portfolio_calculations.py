"""Holdings derivation and portfolio metrics.

Everything here is synchronous and pure: the same ledger always yields the
same holdings, and nothing raises for business reasons. Oversold positions
are clamped to zero instead of being rejected.
"""

import datetime as dt
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from networth.core.constants import LEGACY_MIGRATION_NOTE
from networth.schemas.portfolio import Holding, LegacyStock, PortfolioMetrics
from networth.schemas.transaction import Transaction, TransactionType

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def percent_of(amount: Decimal, base: Decimal) -> Decimal:
    """Return ``amount / base * 100``, or 0 when ``base`` is 0."""
    if base == 0:
        return ZERO
    return amount / base * HUNDRED


@dataclass
class _Position:
    """Running state of one symbol while folding the ledger."""

    symbol: str
    name: str
    currency: str
    exchange: str
    last_price: Decimal
    quantity: Decimal = ZERO
    average_cost: Decimal = ZERO
    transactions: list[Transaction] = field(default_factory=list)

    def apply(self, tx: Transaction) -> None:
        if tx.type == TransactionType.BUY:
            new_quantity = self.quantity + tx.quantity
            self.average_cost = (
                self.average_cost * self.quantity + tx.price * tx.quantity
            ) / new_quantity
            self.quantity = new_quantity
        else:
            self.quantity -= tx.quantity
            if self.quantity <= 0:
                self.quantity = ZERO
                self.average_cost = ZERO
        self.last_price = tx.price
        self.transactions.append(tx)

    def to_holding(self) -> Holding:
        current_value = self.quantity * self.last_price
        cost = self.quantity * self.average_cost
        profit_loss = current_value - cost
        return Holding(
            symbol=self.symbol,
            name=self.name,
            total_quantity=self.quantity,
            average_cost=self.average_cost,
            last_traded_price=self.last_price,
            current_value=current_value,
            profit_loss=profit_loss,
            profit_loss_percent=percent_of(profit_loss, cost),
            currency=self.currency,
            exchange=self.exchange,
            transactions=tuple(self.transactions),
        )


def derive_holdings(transactions: Iterable[Transaction]) -> list[Holding]:
    """
    Fold the ledger into one holding per symbol with a non-zero quantity.

    Transactions are processed in the given (storage) order. Buys move the
    weighted-average cost; sells leave it untouched unless the position is
    closed, in which case both quantity and average cost reset to zero so a
    later buy starts fresh. The last traded price is the price of the last
    transaction seen for the symbol.

    Args:
        transactions: Ledger entries in storage order

    Returns:
        Holdings in first-seen symbol order; closed positions are omitted

    Example:
        ```python
        holdings = derive_holdings(portfolio.transactions)
        metrics = compute_metrics(holdings)
        ```
    """
    positions: dict[str, _Position] = {}

    for tx in transactions:
        position = positions.get(tx.symbol)
        if position is None:
            position = _Position(
                symbol=tx.symbol,
                name=tx.name,
                currency=tx.currency,
                exchange=tx.exchange,
                last_price=tx.price,
            )
            positions[tx.symbol] = position
        position.apply(tx)

    return [p.to_holding() for p in positions.values() if p.quantity > 0]


def compute_metrics(holdings: Sequence[Holding]) -> PortfolioMetrics:
    """
    Sum value and cost over the holdings.

    Day change is not tracked at portfolio level and is always zero.

    Args:
        holdings: Derived (optionally price-refreshed) holdings

    Returns:
        PortfolioMetrics; all zero for an empty list
    """
    total_value = sum((h.current_value for h in holdings), ZERO)
    total_cost = sum((h.total_cost for h in holdings), ZERO)
    total_gain_loss = total_value - total_cost

    return PortfolioMetrics(
        total_value=total_value,
        total_cost=total_cost,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percentage=percent_of(total_gain_loss, total_cost),
        day_change=ZERO,
        day_change_percentage=ZERO,
    )


def migrate_legacy_stocks(stocks: Iterable[LegacyStock]) -> list[Transaction]:
    """Turn positions of the pre-ledger format into BUY transactions."""
    return [
        Transaction(
            id=stock.id or str(uuid.uuid4()),
            symbol=stock.symbol,
            name=stock.name,
            type=TransactionType.BUY,
            quantity=stock.shares,
            price=stock.purchase_price,
            date=stock.purchase_date,
            currency="INR",
            exchange=stock.exchange,
            notes=LEGACY_MIGRATION_NOTE,
        )
        for stock in stocks
    ]


def is_stale(
    last_refresh_time: dt.datetime | None,
    threshold_hours: float,
    now: dt.datetime | None = None,
) -> bool:
    """
    Check whether prices are older than the staleness threshold.

    A portfolio that was never refreshed counts as stale.
    """
    if last_refresh_time is None:
        return True
    now = now or dt.datetime.now(dt.UTC)
    if last_refresh_time.tzinfo is None:
        last_refresh_time = last_refresh_time.replace(tzinfo=dt.UTC)
    return now - last_refresh_time > dt.timedelta(hours=threshold_hours)
