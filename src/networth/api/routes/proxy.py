"""Metal price and FX proxy endpoints used by the browser client.

Both return the upstream JSON unchanged. Failures are reported as
``{"error": "<tag>"}`` rather than the application's usual error body, since
the client only checks for that key.
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from networth.core.config import settings
from networth.core.exceptions import UpstreamError, ValidationError
from networth.core.rate_limit import limiter
from networth.services import metal_price_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/metal/{symbol}")
@limiter.limit(settings.PROXY_RATE_LIMIT)
async def proxy_metal_price(request: Request, symbol: str):
    """
    Spot price of XAU, XAG, BTC or ETH in USD.

    Returns:
        Upstream ``{name, price, symbol, updatedAt}``; 400
        ``{"error": "unsupported_symbol"}`` for other symbols; 502
        ``{"error": "metal_price_fetch_failed"}`` on upstream failure
    """
    try:
        return await metal_price_service.fetch_metal_payload(symbol)
    except ValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": e.error_code}
        )
    except UpstreamError as e:
        logger.warning(f"Metal proxy failed for {symbol}: {e.detail}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"error": e.error_code}
        )


@router.get("/fx/usd-inr")
@limiter.limit(settings.PROXY_RATE_LIMIT)
async def proxy_usd_inr(request: Request):
    """
    USD exchange rates (``{base, rates: {INR, ...}}``).

    Returns:
        Upstream JSON, or 502 ``{"error": "fx_rate_fetch_failed"}``
    """
    try:
        return await metal_price_service.fetch_usd_inr_payload()
    except UpstreamError as e:
        logger.warning(f"FX proxy failed: {e.detail}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY, content={"error": e.error_code}
        )
