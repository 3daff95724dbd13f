"""Balance sheet and scalar balance schemas."""

from decimal import Decimal

from pydantic import Field

from networth.schemas.asset import Asset, AssetSummary
from networth.schemas.base import CamelModel
from networth.schemas.liability import Liability, LiabilityMetrics
from networth.schemas.portfolio import Holding, PortfolioMetrics


class Balances(CamelModel):
    """Free-form balances kept outside the itemised lists."""

    cash: Decimal = Field(Decimal("0"), ge=0)
    other_assets: Decimal = Field(Decimal("0"), ge=0)
    other_liabilities: Decimal = Field(Decimal("0"), ge=0)


class BalancesUpdate(CamelModel):
    """Partial update of the scalar balances."""

    cash: Decimal | None = Field(None, ge=0)
    other_assets: Decimal | None = Field(None, ge=0)
    other_liabilities: Decimal | None = Field(None, ge=0)


class BalanceSheetAssets(CamelModel):
    stocks: list[Holding]
    cash: Decimal
    other_assets: Decimal
    misc_assets: list[Asset]
    misc_assets_value: Decimal
    total_assets: Decimal


class BalanceSheetLiabilities(CamelModel):
    loans: list[Liability]
    credit_cards: list[Liability]
    payables: list[Liability]
    other_liabilities: Decimal
    total_liabilities: Decimal


class BalanceSheetMetrics(CamelModel):
    asset_metrics: PortfolioMetrics
    liability_metrics: LiabilityMetrics
    asset_summary: AssetSummary
    debt_to_asset_ratio: Decimal


class BalanceSheet(CamelModel):
    """Point-in-time view of assets, liabilities and net worth. Never stored."""

    assets: BalanceSheetAssets
    liabilities: BalanceSheetLiabilities
    net_worth: Decimal
    metrics: BalanceSheetMetrics
