"""Metals spot prices and the USD to INR rate.

Spot prices come in USD per troy ounce (per unit for crypto); the tracker
values gold and silver in INR per gram:

    inr_per_gram = usd_per_oz * usd_inr / 31.1034768

The raw payload fetchers back the ``/api/metal`` and ``/api/fx`` proxy
routes, which return the upstream JSON unchanged.
"""

import asyncio
import logging
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from networth.core.config import settings
from networth.core.constants import MetalConstants
from networth.core.exceptions import UpstreamError, ValidationError
from networth.schemas.quote import MetalPrices

logger = logging.getLogger(__name__)

METAL_FETCH_FAILED = "metal_price_fetch_failed"
FX_FETCH_FAILED = "fx_rate_fetch_failed"
UNSUPPORTED_SYMBOL = "unsupported_symbol"


async def _get_json(url: str, tag: str) -> Any:
    try:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
            response = await client.get(url, headers={"Accept": "application/json"})
            response.raise_for_status()
            return response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"Upstream {url} returned {e.response.status_code}")
        raise UpstreamError(f"Upstream returned {e.response.status_code}", error_code=tag) from e
    except httpx.HTTPError as e:
        logger.error(f"HTTP error calling {url}: {e}")
        raise UpstreamError(f"Upstream request failed: {e}", error_code=tag) from e
    except ValueError as e:
        logger.error(f"Invalid JSON from {url}: {e}")
        raise UpstreamError("Upstream returned invalid JSON", error_code=tag) from e


def normalize_metal_symbol(symbol: str) -> str:
    """
    Upper-case and validate a metal/crypto symbol.

    Raises:
        ValidationError: If the symbol is not one of XAU, XAG, BTC, ETH
    """
    normalized = symbol.strip().upper()
    if normalized not in MetalConstants.SUPPORTED_SYMBOLS:
        raise ValidationError(f"Unsupported symbol '{symbol}'", error_code=UNSUPPORTED_SYMBOL)
    return normalized


async def fetch_metal_payload(symbol: str) -> Any:
    """
    Fetch the raw spot price payload for a symbol.

    The upstream answers ``{name, price, symbol, updatedAt}``.

    Raises:
        ValidationError: If the symbol is unsupported
        UpstreamError: If the upstream fails (error_code "metal_price_fetch_failed")
    """
    symbol = normalize_metal_symbol(symbol)
    url = f"{settings.METAL_PRICE_API_URL.rstrip('/')}/{symbol}"
    return await _get_json(url, METAL_FETCH_FAILED)


async def fetch_usd_inr_payload() -> Any:
    """
    Fetch the raw USD exchange rate payload (``{base, rates: {INR, ...}}``).

    Raises:
        UpstreamError: If the upstream fails (error_code "fx_rate_fetch_failed")
    """
    return await _get_json(settings.FX_API_URL, FX_FETCH_FAILED)


def _positive_decimal(value: Any, what: str, tag: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise UpstreamError(f"Upstream returned an invalid {what}", error_code=tag) from e
    if not result.is_finite() or result <= 0:
        raise UpstreamError(f"Upstream returned an invalid {what}", error_code=tag)
    return result


async def get_usd_price(symbol: str) -> Decimal:
    """USD price per troy ounce (per unit for crypto)."""
    payload = await fetch_metal_payload(symbol)
    price = payload.get("price") if isinstance(payload, dict) else None
    return _positive_decimal(price, "price", METAL_FETCH_FAILED)


async def get_usd_inr_rate() -> Decimal:
    """Rupees per US dollar."""
    payload = await fetch_usd_inr_payload()
    rates = payload.get("rates") if isinstance(payload, dict) else None
    rate = rates.get("INR") if isinstance(rates, dict) else None
    return _positive_decimal(rate, "USD/INR rate", FX_FETCH_FAILED)


def usd_per_ounce_to_inr_per_gram(usd_per_oz: Decimal, usd_inr: Decimal) -> Decimal:
    """Convert a USD/troy-ounce spot price to INR per gram."""
    return usd_per_oz * usd_inr / MetalConstants.TROY_OUNCE_TO_GRAMS


async def get_inr_per_gram(symbol: str) -> Decimal:
    """
    Live INR price per gram for gold (XAU) or silver (XAG).

    Raises:
        ValidationError: If the symbol is unsupported
        UpstreamError: If either the spot price or the FX rate is unavailable
    """
    usd_per_oz, usd_inr = await asyncio.gather(
        get_usd_price(symbol), get_usd_inr_rate(), return_exceptions=True
    )
    # Both lookups finish before either error is raised
    for result in (usd_per_oz, usd_inr):
        if isinstance(result, BaseException):
            raise result
    return usd_per_ounce_to_inr_per_gram(usd_per_oz, usd_inr)


async def get_background_prices() -> MetalPrices:
    """
    Gold and silver INR per gram plus USD/INR, each fetched independently.

    A failing upstream only blanks the value that depends on it; this call
    never raises for upstream failures.
    """
    gold, silver, usd_inr = await asyncio.gather(
        get_inr_per_gram(MetalConstants.GOLD_SYMBOL),
        get_inr_per_gram(MetalConstants.SILVER_SYMBOL),
        get_usd_inr_rate(),
        return_exceptions=True,
    )

    def _value(name: str, result: Decimal | BaseException) -> Decimal | None:
        if isinstance(result, BaseException):
            logger.warning(f"Background price '{name}' unavailable: {result}")
            return None
        return result

    return MetalPrices(
        gold_inr_per_gram=_value("gold", gold),
        silver_inr_per_gram=_value("silver", silver),
        usd_inr_rate=_value("usd_inr", usd_inr),
        last_updated=datetime.now(UTC),
    )
