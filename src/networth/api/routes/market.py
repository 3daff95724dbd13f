"""Market data endpoints: symbol search, quotes and metal prices."""

from typing import Annotated

from fastapi import APIRouter, Query

from networth.core.constants import SearchConstants
from networth.core.deps import QuoteProviderDep
from networth.schemas.quote import MetalPrices, Quote, StockSearchResult
from networth.services import metal_price_service, yfinance_service

router = APIRouter()


@router.get("/search", response_model=list[StockSearchResult])
async def search_stocks(
    q: Annotated[str, Query(min_length=SearchConstants.MIN_QUERY_LENGTH, max_length=50)],
    limit: Annotated[int, Query(ge=1, le=50)] = SearchConstants.MAX_SEARCH_RESULTS,
) -> list[StockSearchResult]:
    """
    Search Yahoo Finance by company name or ticker.

    Example:
        GET /api/v1/market/search?q=reliance
    """
    return await yfinance_service.search(q, limit)


@router.get("/quote/{symbol}", response_model=Quote)
async def get_quote(
    symbol: str,
    provider: QuoteProviderDep,
    exchange: str = "NSE",
) -> Quote:
    """
    Get the live quote of one symbol.

    Raises:
        InvalidSymbolError: If no provider knows the symbol (404)
        ExternalAPIError: If the provider is unavailable (503)
    """
    return await provider.get_quote(symbol.upper(), exchange)


@router.get("/metals", response_model=MetalPrices)
async def get_metal_prices() -> MetalPrices:
    """
    Get gold and silver INR per gram and the USD/INR rate.

    Each value is null when its upstream is unavailable.
    """
    return await metal_price_service.get_background_prices()
