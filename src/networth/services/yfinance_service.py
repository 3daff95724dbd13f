"""Service layer for interacting with the yfinance API.

Note:
    HTTP caching is configured globally via requests-cache with a Redis
    backend (see networth.core.cache), so repeated quote lookups within the
    cache window never reach Yahoo Finance.

The yfinance calls block, so the async wrappers at the bottom run them in
the default executor.
"""

import asyncio
import logging
from datetime import UTC, datetime
from decimal import Decimal

import pandas as pd
import yfinance as yf

from networth.core.constants import RefreshConstants, SearchConstants
from networth.core.exceptions import ExternalAPIError, InvalidSymbolError
from networth.schemas.quote import Quote, StockSearchResult

logger = logging.getLogger(__name__)


def to_yahoo_symbol(symbol: str, exchange: str | None = None) -> str:
    """
    Map a ledger symbol to its Yahoo Finance ticker.

    Indian listings carry an exchange suffix on Yahoo (``RELIANCE.NS``,
    ``RELIANCE.BO``). Symbols that already contain a suffix are left alone.

    Example:
        >>> to_yahoo_symbol("reliance", "NSE")
        'RELIANCE.NS'
        >>> to_yahoo_symbol("AAPL", "NASDAQ")
        'AAPL'
    """
    symbol = symbol.strip().upper()
    suffix = RefreshConstants.YAHOO_SUFFIXES.get((exchange or "").upper())
    if suffix and "." not in symbol:
        return f"{symbol}{suffix}"
    return symbol


def _to_decimal(value: float) -> Decimal:
    # Go through str so binary float noise does not leak into the Decimal
    return Decimal(str(round(float(value), 6)))


def quote_from_history(symbol: str, history: pd.DataFrame, currency: str | None) -> Quote:
    """
    Build a quote from a daily price history.

    The last close is the current price; the change is measured against the
    close before it. Rows with a missing close are ignored.

    Raises:
        InvalidSymbolError: If the history holds no usable close
    """
    closes = history["Close"].dropna() if "Close" in history else pd.Series(dtype=float)
    if closes.empty:
        raise InvalidSymbolError(f"No price data available for symbol '{symbol}'")

    price = _to_decimal(closes.iloc[-1])
    previous = _to_decimal(closes.iloc[-2]) if len(closes) > 1 else price
    change = price - previous
    change_percent = (change / previous * 100) if previous != 0 else Decimal("0")

    return Quote(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=change_percent.quantize(Decimal("0.0001")),
        currency=currency or "INR",
        timestamp=datetime.now(UTC),
    )


def fetch_quote(symbol: str, exchange: str | None = None) -> Quote:
    """
    Fetch the latest price of a symbol from Yahoo Finance.

    Args:
        symbol: Ledger symbol (e.g., "RELIANCE", "AAPL")
        exchange: Exchange of the ledger entry, used for the Yahoo suffix

    Returns:
        Quote keyed by the ledger symbol (without the Yahoo suffix)

    Raises:
        InvalidSymbolError: If Yahoo Finance has no data for the symbol
        ExternalAPIError: If the request fails
    """
    yahoo_symbol = to_yahoo_symbol(symbol, exchange)
    try:
        ticker = yf.Ticker(yahoo_symbol)
        history = ticker.history(period="5d", interval="1d")
        currency = None
        try:
            currency = ticker.fast_info.get("currency")
        except Exception as e:
            logger.debug(f"Currency lookup failed for {yahoo_symbol}: {e}")
        return quote_from_history(symbol.upper(), history, currency)

    except Exception as e:
        if isinstance(e, ExternalAPIError):
            raise
        logger.error(f"Error fetching quote for {yahoo_symbol}: {e}")
        raise ExternalAPIError(f"Failed to fetch quote for {symbol}: {e}") from e


def search_symbols(
    query: str, limit: int = SearchConstants.MAX_SEARCH_RESULTS
) -> list[StockSearchResult]:
    """
    Search Yahoo Finance for symbols matching a company name or ticker.

    Args:
        query: Free-text search
        limit: Maximum number of results

    Returns:
        Matching symbols, best match first (empty for a blank query)

    Raises:
        ExternalAPIError: If the search request fails
    """
    query = query.strip()
    if len(query) < SearchConstants.MIN_QUERY_LENGTH:
        return []

    try:
        search = yf.Search(query, max_results=limit, news_count=0)
        quotes = search.quotes or []
    except Exception as e:
        logger.error(f"Error searching symbols for '{query}': {e}")
        raise ExternalAPIError(f"Symbol search failed: {e}") from e

    results = []
    for item in quotes[:limit]:
        symbol = item.get("symbol")
        if not symbol:
            continue
        results.append(
            StockSearchResult(
                symbol=symbol,
                name=item.get("longname") or item.get("shortname") or symbol,
                exchange=item.get("exchange"),
                quote_type=item.get("quoteType"),
            )
        )
    return results


async def get_quote(symbol: str, exchange: str | None = None) -> Quote:
    """Async wrapper around fetch_quote (runs in executor)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fetch_quote, symbol, exchange)


async def search(
    query: str, limit: int = SearchConstants.MAX_SEARCH_RESULTS
) -> list[StockSearchResult]:
    """Async wrapper around search_symbols (runs in executor)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, search_symbols, query, limit)
