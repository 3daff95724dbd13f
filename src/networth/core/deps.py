"""Dependencies for FastAPI routes.

Routes never build their collaborators themselves; tests swap them through
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from networth.db.session import get_db
from networth.repositories.portfolio_store import PortfolioStore
from networth.services import metal_price_service
from networth.services.asset_service import PricePerGram
from networth.services.quote_service import MarketQuoteProvider, QuoteProvider


async def get_store(db: Annotated[AsyncSession, Depends(get_db)]) -> PortfolioStore:
    """Portfolio store bound to the request's database session."""
    return PortfolioStore(db)


def get_quote_provider() -> QuoteProvider:
    """Live quote source used by refresh and the market data routes."""
    return MarketQuoteProvider()


def get_price_per_gram() -> PricePerGram:
    """Live INR-per-gram lookup used to value gold and silver."""
    return metal_price_service.get_inr_per_gram


# Type aliases for cleaner route signatures
StoreDep = Annotated[PortfolioStore, Depends(get_store)]
QuoteProviderDep = Annotated[QuoteProvider, Depends(get_quote_provider)]
PricePerGramDep = Annotated[PricePerGram, Depends(get_price_per_gram)]
