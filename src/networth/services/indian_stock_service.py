"""Client for the Indian stock market API (NSE/BSE quotes in INR).

The API answers ``GET {INDIAN_API_URL}/stock?name=<symbol>`` with a flat JSON
object. Only the price fields are read: ``current_price`` (or ``price``),
``change``, ``change_percent`` and ``previous_close``.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from networth.core.config import settings
from networth.core.exceptions import ExternalAPIError, InvalidSymbolError, RateLimitedError
from networth.schemas.quote import Quote

logger = logging.getLogger(__name__)


def _decimal_or_none(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def parse_stock_payload(symbol: str, data: dict[str, Any]) -> Quote:
    """
    Read a quote out of the API's stock payload.

    Missing change fields are derived from the previous close.

    Raises:
        InvalidSymbolError: If the payload carries no current price
    """
    price = _decimal_or_none(data.get("current_price"))
    if price is None:
        price = _decimal_or_none(data.get("price"))
    if price is None:
        raise InvalidSymbolError(f"No price returned for symbol '{symbol}'")

    previous_close = _decimal_or_none(data.get("previous_close")) or price
    change = _decimal_or_none(data.get("change"))
    if change is None:
        change = price - previous_close
    change_percent = _decimal_or_none(data.get("change_percent"))
    if change_percent is None:
        change_percent = change / previous_close * 100 if previous_close else Decimal("0")

    return Quote(
        symbol=symbol.upper(),
        price=price,
        change=change,
        change_percent=change_percent,
        currency="INR",
        timestamp=datetime.now(UTC),
    )


async def fetch_stock_quote(symbol: str, api_key: str | None = None) -> Quote:
    """
    Fetch the current quote for an NSE/BSE symbol.

    Args:
        symbol: Exchange symbol without suffix (e.g., "RELIANCE")
        api_key: API key, defaults to the INDIAN_API_KEY setting

    Returns:
        Quote in INR

    Raises:
        ExternalAPIError: If no API key is configured or the request fails
        RateLimitedError: If the API reports its quota is exhausted
        InvalidSymbolError: If the API does not know the symbol
    """
    api_key = api_key or settings.INDIAN_API_KEY
    if not api_key:
        raise ExternalAPIError("Indian market API key is not configured")

    url = f"{settings.INDIAN_API_URL.rstrip('/')}/stock"
    headers = {"x-api-key": api_key, "Accept": "application/json"}

    try:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
            response = await client.get(url, params={"name": symbol}, headers=headers)
            response.raise_for_status()
            data = response.json()

    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        logger.error(f"Indian market API returned {status_code} for {symbol}")
        if status_code == 429:
            raise RateLimitedError(f"Indian market API quota exhausted ({symbol})") from e
        if status_code == 404:
            raise InvalidSymbolError(f"Symbol '{symbol}' not found") from e
        raise ExternalAPIError(f"Indian market API error {status_code} for {symbol}") from e
    except httpx.HTTPError as e:
        logger.error(f"HTTP error fetching quote for {symbol}: {e}")
        raise ExternalAPIError(f"Indian market API request failed: {e}") from e
    except ValueError as e:
        logger.error(f"Invalid JSON from Indian market API for {symbol}: {e}")
        raise ExternalAPIError("Indian market API returned invalid JSON") from e

    if not isinstance(data, dict):
        raise ExternalAPIError("Indian market API returned an unexpected payload")

    return parse_stock_payload(symbol, data)


async def check_connectivity(symbol: str, api_key: str | None = None) -> Quote:
    """Check the API is reachable with one known symbol; raises like fetch_stock_quote."""
    quote = await fetch_stock_quote(symbol, api_key)
    logger.info(f"Indian market API reachable ({symbol} @ {quote.price})")
    return quote
