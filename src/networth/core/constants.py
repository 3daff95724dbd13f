"""Application-wide constants.

Grouped by concern so that storage keys, liability buckets and price
conversion factors have a single source of truth.
"""

from decimal import Decimal


class StorageKeys:
    """Keys of the persisted key/value entries."""

    PORTFOLIO = "stock-portfolio"
    LIABILITIES = "liabilities"
    ASSETS = "assets"
    CASH = "cash"
    OTHER_ASSETS = "otherAssets"
    OTHER_LIABILITIES = "otherLiabilities"


class LiabilityBuckets:
    """Liability types grouped into balance sheet display buckets.

    Types outside every bucket (OTHER) still count towards the totals.
    """

    LOANS = frozenset({"LOAN", "MORTGAGE", "PERSONAL_LOAN", "STUDENT_LOAN", "CAR_LOAN"})
    CREDIT_CARDS = frozenset({"CREDIT_CARD"})
    PAYABLES = frozenset({"PAYABLE", "COMMITTED_EXPENSE"})


class MetalConstants:
    """Constants for metal and crypto spot price conversion."""

    TROY_OUNCE_TO_GRAMS = Decimal("31.1034768")
    GOLD_SYMBOL = "XAU"
    SILVER_SYMBOL = "XAG"
    SUPPORTED_SYMBOLS = frozenset({"XAU", "XAG", "BTC", "ETH"})


class RefreshConstants:
    """Constants for the portfolio price refresh."""

    # Symbol requested to check the Indian market API during the bulk refresh step
    CHECK_SYMBOL = "RELIANCE"

    # Exchanges whose symbols are quoted by the Indian market API
    INDIAN_EXCHANGES = frozenset({"NSE", "BSE"})

    # Yahoo Finance suffixes for Indian listings
    YAHOO_SUFFIXES = {"NSE": ".NS", "BSE": ".BO"}


class SearchConstants:
    """Constants for stock search."""

    MAX_SEARCH_RESULTS = 10
    MIN_QUERY_LENGTH = 1


LEGACY_MIGRATION_NOTE = "Migrated from old portfolio"
