"""Portfolio endpoints: holdings, metrics, price refresh and import."""

from typing import Any

from fastapi import APIRouter, Body, Request

from networth.core.config import settings
from networth.core.deps import QuoteProviderDep, StoreDep
from networth.core.rate_limit import limiter
from networth.schemas.portfolio import (
    Holding,
    ImportSummary,
    PortfolioMetrics,
    PortfolioResponse,
    RefreshResponse,
)
from networth.services import portfolio_service

router = APIRouter()


@router.get("", response_model=PortfolioResponse)
async def get_portfolio(store: StoreDep) -> PortfolioResponse:
    """
    Get the stored portfolio container.

    ``hasStaleData`` is true when prices were never refreshed or the last
    refresh is older than the staleness threshold.
    """
    return await portfolio_service.get_portfolio(store)


@router.get("/holdings", response_model=list[Holding])
async def get_holdings(store: StoreDep) -> list[Holding]:
    """Get the current holdings (as of the last ledger change or refresh)."""
    return await portfolio_service.get_holdings(store)


@router.get("/metrics", response_model=PortfolioMetrics)
async def get_metrics(store: StoreDep) -> PortfolioMetrics:
    """Get portfolio value, cost and gain/loss totals."""
    return await portfolio_service.get_metrics(store)


@router.post("/refresh", response_model=RefreshResponse)
@limiter.limit(settings.REFRESH_RATE_LIMIT)
async def refresh_prices(
    request: Request,
    store: StoreDep,
    provider: QuoteProviderDep,
) -> RefreshResponse:
    """
    Fetch live prices for every symbol in the ledger.

    Always answers 200: a failed bulk step is reported in ``error`` with the
    stored prices untouched, and symbols whose quote failed are listed in
    ``failedSymbols`` and keep their ledger-derived price.

    Example:
        POST /api/v1/portfolio/refresh
    """
    return await portfolio_service.refresh(store, provider)


@router.post("/import", response_model=ImportSummary)
async def import_portfolio(
    store: StoreDep,
    document: dict[str, Any] = Body(...),
) -> ImportSummary:
    """
    Replace the portfolio with an exported container.

    Accepts the current ``{transactions, ...}`` format and the legacy
    ``{stocks: [...]}`` format, which is converted into BUY transactions.

    Raises:
        ValidationError: If the document matches neither format
    """
    return await portfolio_service.import_portfolio(store, document)
