"""Schemas package."""

from networth.schemas.asset import (
    Asset,
    AssetCreate,
    AssetDetails,
    AssetSummary,
    AssetType,
    AssetUpdate,
)
from networth.schemas.balance_sheet import (
    Balances,
    BalanceSheet,
    BalanceSheetAssets,
    BalanceSheetLiabilities,
    BalanceSheetMetrics,
    BalancesUpdate,
)
from networth.schemas.liability import (
    Liability,
    LiabilityCategory,
    LiabilityCreate,
    LiabilityMetrics,
    LiabilityTerm,
    LiabilityType,
    LiabilityUpdate,
)
from networth.schemas.portfolio import (
    Holding,
    ImportSummary,
    LegacyPortfolio,
    LegacyStock,
    Portfolio,
    PortfolioMetrics,
    PortfolioResponse,
    RefreshResponse,
)
from networth.schemas.quote import MetalPrices, Quote, StockSearchResult
from networth.schemas.transaction import (
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
)

__all__ = [
    # Transaction schemas
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "TransactionUpdate",
    # Portfolio schemas
    "Holding",
    "ImportSummary",
    "LegacyPortfolio",
    "LegacyStock",
    "Portfolio",
    "PortfolioMetrics",
    "PortfolioResponse",
    "RefreshResponse",
    # Asset schemas
    "Asset",
    "AssetCreate",
    "AssetDetails",
    "AssetSummary",
    "AssetType",
    "AssetUpdate",
    # Liability schemas
    "Liability",
    "LiabilityCategory",
    "LiabilityCreate",
    "LiabilityMetrics",
    "LiabilityTerm",
    "LiabilityType",
    "LiabilityUpdate",
    # Balance sheet schemas
    "Balances",
    "BalancesUpdate",
    "BalanceSheet",
    "BalanceSheetAssets",
    "BalanceSheetLiabilities",
    "BalanceSheetMetrics",
    # Market data schemas
    "MetalPrices",
    "Quote",
    "StockSearchResult",
]
