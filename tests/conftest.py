"""Pytest fixtures for testing."""

import datetime as dt
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from networth.core.deps import get_price_per_gram, get_quote_provider
from networth.core.exceptions import ExternalAPIError, InvalidSymbolError, UpstreamError
from networth.core.rate_limit import limiter
from networth.db.base import Base
from networth.db.session import get_db
from networth.models.storage_entry import StorageEntry  # noqa: F401
from networth.repositories.portfolio_store import PortfolioStore
from networth.schemas.quote import Quote
from main import app

# Test database URL (SQLite in-memory for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeQuoteProvider:
    """In-memory quote source.

    Symbols listed in ``failing`` raise ExternalAPIError, unknown symbols
    raise InvalidSymbolError, and ``bulk_error`` (when set) is raised by the
    bulk refresh step.
    """

    def __init__(self) -> None:
        self.prices: dict[str, Decimal] = {}
        self.changes: dict[str, Decimal] = {}
        self.failing: set[str] = set()
        self.bulk_error: Exception | None = None
        self.requested: list[tuple[str, str | None]] = []
        self.bulk_calls = 0

    async def get_quote(self, symbol: str, exchange: str | None = None) -> Quote:
        self.requested.append((symbol, exchange))
        if symbol in self.failing:
            raise ExternalAPIError(f"Quote source down for {symbol}")
        if symbol not in self.prices:
            raise InvalidSymbolError(f"Symbol '{symbol}' not found")
        return Quote(
            symbol=symbol,
            price=self.prices[symbol],
            change=self.changes.get(symbol, Decimal("0")),
            change_percent=Decimal("0"),
            timestamp=dt.datetime.now(dt.UTC),
        )

    async def refresh_all_data(self) -> None:
        self.bulk_calls += 1
        if self.bulk_error is not None:
            raise self.bulk_error


@pytest.fixture(autouse=True)
def reset_limiter():
    """Reset rate limiter storage before each test."""
    limiter.reset()
    yield
    limiter.reset()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_db(test_engine) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def store(test_db: AsyncSession) -> PortfolioStore:
    """Portfolio store bound to the test session."""
    return PortfolioStore(test_db)


@pytest.fixture
def quote_provider() -> FakeQuoteProvider:
    return FakeQuoteProvider()


@pytest.fixture
def metal_prices() -> dict[str, Decimal]:
    """INR per gram returned by the fake metal price lookup; remove a key to fail it."""
    return {"XAU": Decimal("7000"), "XAG": Decimal("90")}


@pytest.fixture
def price_per_gram(metal_prices: dict[str, Decimal]):
    async def lookup(symbol: str) -> Decimal:
        if symbol not in metal_prices:
            raise UpstreamError(f"No price for {symbol}", error_code="metal_price_fetch_failed")
        return metal_prices[symbol]

    return lookup


@pytest_asyncio.fixture(scope="function")
async def client(
    test_db: AsyncSession,
    quote_provider: FakeQuoteProvider,
    price_per_gram,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database and price source overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_provider] = lambda: quote_provider
    app.dependency_overrides[get_price_per_gram] = lambda: price_per_gram

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
