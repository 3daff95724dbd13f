"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from networth.core.cache import get_cache_stats
from networth.db.session import get_db

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/db")
async def database_health(db: Annotated[AsyncSession, Depends(get_db)]):
    """Database health check (the key/value store lives there)."""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        return {"status": "unhealthy", "database": str(e)}


@router.get("/health/cache")
async def cache_health():
    """
    Quote cache health check and statistics.

    Returns cache status, backend type, and size (if available).
    """
    stats = get_cache_stats()
    if stats.get("enabled"):
        return {"status": "healthy", "cache": stats}
    return {"status": "disabled", "cache": stats}
