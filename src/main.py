"""FastAPI application entry point."""

import logging
import logging.config
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from networth.api.routes import (
    assets,
    balance_sheet,
    health,
    liabilities,
    market,
    portfolio,
    proxy,
    spa,
    transactions,
)
from networth.core.cache import configure_quote_cache
from networth.core.config import settings
from networth.core.exceptions import AppException, app_exception_handler
from networth.core.middleware import RequestLoggingMiddleware
from networth.core.rate_limit import limiter, rate_limit_exceeded_handler
from networth.db.base import Base
from networth.db.session import engine

# Configure logging
logging.config.dictConfig(settings.LOGGING_CONFIG)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    # Create tables (use Alembic in production)
    if settings.ENVIRONMENT == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # Cache Yahoo Finance HTTP traffic in Redis
    configure_quote_cache()

    yield

    logger.info("Shutting down")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# Add request/response logging middleware
# Note: Middleware is applied in reverse order, so this will be the outermost layer
app.add_middleware(RequestLoggingMiddleware)

# Register exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(transactions.router, prefix="/api/v1/transactions", tags=["transactions"])
app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["portfolio"])
app.include_router(liabilities.router, prefix="/api/v1/liabilities", tags=["liabilities"])
app.include_router(assets.router, prefix="/api/v1/assets", tags=["assets"])
app.include_router(balance_sheet.router, prefix="/api/v1", tags=["balance-sheet"])
app.include_router(market.router, prefix="/api/v1/market", tags=["market"])
app.include_router(proxy.router, prefix="/api", tags=["proxy"])

# Must stay last: catches every other GET for the client bundle
app.include_router(spa.router)
