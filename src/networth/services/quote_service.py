"""Quote provider used by the portfolio refresh.

``MarketQuoteProvider`` picks a source per symbol: NSE/BSE listings go to the
Indian market API when an API key is configured, everything else (and Indian
listings without a key) goes to Yahoo Finance.
"""

import logging
from typing import Protocol

from networth.core.cache import clear_quote_cache
from networth.core.config import settings
from networth.core.constants import RefreshConstants
from networth.core.exceptions import ExternalAPIError
from networth.schemas.quote import Quote
from networth.services import indian_stock_service, yfinance_service

logger = logging.getLogger(__name__)


class QuoteProvider(Protocol):
    """Source of live prices for ledger symbols."""

    async def get_quote(self, symbol: str, exchange: str | None = None) -> Quote:
        """Latest quote; raises an ExternalAPIError subclass on failure."""
        ...

    async def refresh_all_data(self) -> None:
        """Bulk step run before a refresh; raises ExternalAPIError on failure."""
        ...


class MarketQuoteProvider:
    """Routes quote requests to the Indian market API or Yahoo Finance.

    Example:
        >>> provider = MarketQuoteProvider()
        >>> quote = await provider.get_quote("RELIANCE", "NSE")
    """

    def __init__(self, indian_api_key: str | None = None):
        if indian_api_key is None:
            indian_api_key = settings.INDIAN_API_KEY
        self.indian_api_key = indian_api_key

    def uses_indian_api(self, exchange: str | None) -> bool:
        if not self.indian_api_key:
            return False
        return (exchange or "").upper() in RefreshConstants.INDIAN_EXCHANGES

    async def get_quote(self, symbol: str, exchange: str | None = None) -> Quote:
        if self.uses_indian_api(exchange):
            return await indian_stock_service.fetch_stock_quote(symbol, self.indian_api_key)
        return await yfinance_service.get_quote(symbol, exchange)

    async def refresh_all_data(self) -> None:
        """
        Drop cached quotes and, when configured, check the Indian market API is reachable.

        Raises:
            ExternalAPIError: If the Indian market API cannot be reached
        """
        clear_quote_cache()
        if not self.indian_api_key:
            logger.debug("Indian market API not configured, skipping connectivity check")
            return
        try:
            await indian_stock_service.check_connectivity(
                RefreshConstants.CHECK_SYMBOL, self.indian_api_key
            )
        except ExternalAPIError as e:
            logger.error(f"Bulk refresh failed: {e.detail}")
            raise
