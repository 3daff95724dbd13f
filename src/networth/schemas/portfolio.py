"""Holding, portfolio metrics and portfolio container schemas."""

import datetime as dt
from decimal import Decimal

from pydantic import ConfigDict, Field, field_validator

from networth.schemas.asset import Asset
from networth.schemas.base import CamelModel
from networth.schemas.transaction import Transaction


class Holding(CamelModel):
    """Aggregated position in one symbol, derived from the ledger.

    Holdings are never edited in place; a price refresh produces a new
    instance with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    total_quantity: Decimal
    average_cost: Decimal
    last_traded_price: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal
    day_change: Decimal = Decimal("0")
    day_change_percent: Decimal = Decimal("0")
    currency: str = "INR"
    exchange: str = "NSE"
    transactions: tuple[Transaction, ...] = ()

    @property
    def total_cost(self) -> Decimal:
        return self.total_quantity * self.average_cost


class PortfolioMetrics(CamelModel):
    """Totals over a list of holdings."""

    total_value: Decimal = Decimal("0")
    total_cost: Decimal = Decimal("0")
    total_gain_loss: Decimal = Decimal("0")
    total_gain_loss_percentage: Decimal = Decimal("0")
    day_change: Decimal = Decimal("0")
    day_change_percentage: Decimal = Decimal("0")


class Portfolio(CamelModel):
    """The persisted portfolio container.

    ``transactions`` is the source of truth; ``holdings`` and ``metrics`` are
    a cache of the last derivation (and of the last price refresh).
    """

    holdings: list[Holding] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    assets: list[Asset] = Field(default_factory=list)
    metrics: PortfolioMetrics = Field(default_factory=PortfolioMetrics)
    last_updated: dt.datetime | None = None
    last_refresh_time: dt.datetime | None = None


class PortfolioResponse(Portfolio):
    """Portfolio container plus the staleness flag shown next to prices."""

    has_stale_data: bool


class RefreshResponse(CamelModel):
    """Outcome of a price refresh.

    ``error`` carries the bulk refresh failure message, in which case the
    holdings and metrics are the stored ones, untouched.
    """

    holdings: list[Holding]
    metrics: PortfolioMetrics
    last_refresh_time: dt.datetime | None = None
    refreshed_symbols: list[str] = Field(default_factory=list)
    failed_symbols: list[str] = Field(default_factory=list)
    error: str | None = None


class LegacyStock(CamelModel):
    """A position in the pre-ledger portfolio format."""

    id: str | None = None
    symbol: str = Field(..., min_length=1)
    name: str
    shares: Decimal = Field(..., gt=0)
    purchase_price: Decimal = Field(..., ge=0)
    current_price: Decimal | None = None
    purchase_date: dt.date
    currency: str = "INR"
    exchange: str = "NSE"
    sector: str | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()


class LegacyPortfolio(CamelModel):
    """Stored container written before transactions existed."""

    stocks: list[LegacyStock]


class ImportSummary(CamelModel):
    """Result of importing a portfolio container."""

    migrated: bool
    transaction_count: int
    holding_count: int
    metrics: PortfolioMetrics
