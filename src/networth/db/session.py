"""Database engine, session dependency and transaction helper.

The database only holds the key/value storage table, so the engine setup is
shared by PostgreSQL (asyncpg) in production and SQLite (aiosqlite) for local
runs and tests.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from networth.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, **overrides: Any) -> AsyncEngine:
    """Create an async engine with pool options suited to the backend.

    SQLite does not accept queue pool sizing, so pool options are only passed
    for server databases.

    Args:
        database_url: SQLAlchemy async URL
        **overrides: Extra keyword arguments forwarded to create_async_engine

    Returns:
        Configured AsyncEngine
    """
    options: dict[str, Any] = {"echo": settings.DB_ECHO}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    options.update(overrides)
    return create_async_engine(database_url, **options)


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency for route handlers.

    Commits when the request handler finishes cleanly and rolls back on any
    exception.

    Yields:
        AsyncSession: Database session for the request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transactional(
    db: AsyncSession,
    *,
    commit: bool = True,
) -> AsyncGenerator[AsyncSession, None]:
    """Explicit transaction context manager with automatic commit/rollback.

    Services wrap every read-modify-write of the stored portfolio in this so
    that the ledger, the derived holdings cache and the timestamps are saved
    together.

    Args:
        db: The database session
        commit: Whether to commit on success (default: True)

    Yields:
        AsyncSession: The database session

    Example:
        ```python
        async with transactional(db):
            store = PortfolioStore(db)
            await store.save_liabilities(liabilities)
        ```
    """
    try:
        yield db
        if commit:
            await db.commit()
            logger.debug("Transaction committed successfully")
    except Exception as e:
        await db.rollback()
        logger.error(f"Transaction rolled back due to error: {type(e).__name__}: {e}")
        raise
