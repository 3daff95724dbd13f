"""Market data schemas."""

import datetime as dt
from decimal import Decimal

from networth.schemas.base import CamelModel


class Quote(CamelModel):
    """Latest price for one symbol."""

    symbol: str
    price: Decimal
    change: Decimal = Decimal("0")
    change_percent: Decimal = Decimal("0")
    currency: str = "INR"
    timestamp: dt.datetime


class StockSearchResult(CamelModel):
    """One hit of a symbol search."""

    symbol: str
    name: str
    exchange: str | None = None
    quote_type: str | None = None


class MetalPrices(CamelModel):
    """Gold and silver INR per gram plus the USD to INR rate.

    Each value is fetched independently and is ``None`` when its upstream
    failed.
    """

    gold_inr_per_gram: Decimal | None = None
    silver_inr_per_gram: Decimal | None = None
    usd_inr_rate: Decimal | None = None
    last_updated: dt.datetime
