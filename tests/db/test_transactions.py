"""Tests for the transactional context manager.

Tests verify that the context manager properly handles:
- Automatic commit on success
- Automatic rollback on exception
- Leaving the commit to the caller when asked to
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from networth.db.session import build_engine, transactional
from networth.models.storage_entry import StorageEntry
from networth.repositories.storage import KeyValueRepository

pytestmark = pytest.mark.integration


class TestTransactionalContextManager:
    """Tests for the transactional context manager."""

    async def test_transactional_commits_on_success(self, test_db: AsyncSession) -> None:
        """Test that transactional context commits changes on successful exit."""
        repo = KeyValueRepository(test_db)

        async with transactional(test_db):
            await repo.set("cash", "1000")

        # A rollback after the commit must not undo it
        await test_db.rollback()

        entry = await test_db.get(StorageEntry, "cash")
        assert entry is not None
        assert entry.value == "1000"

    async def test_transactional_rolls_back_on_exception(self, test_db: AsyncSession) -> None:
        """Test that transactional context rolls back on exception."""
        repo = KeyValueRepository(test_db)

        with pytest.raises(ValueError):
            async with transactional(test_db):
                await repo.set("cash", "1000")
                raise ValueError("Intentional error for testing")

        assert await repo.get("cash") is None

    async def test_transactional_commit_false_does_not_commit(
        self, test_db: AsyncSession
    ) -> None:
        """Test that commit=False leaves the changes uncommitted."""
        repo = KeyValueRepository(test_db)

        async with transactional(test_db, commit=False):
            await repo.set("cash", "1000")

        await test_db.rollback()

        assert await repo.get("cash") is None

    async def test_transactional_keeps_earlier_commits(self, test_db: AsyncSession) -> None:
        """A failed write only undoes its own changes."""
        repo = KeyValueRepository(test_db)

        async with transactional(test_db):
            await repo.set("cash", "1000")

        with pytest.raises(RuntimeError):
            async with transactional(test_db):
                await repo.set("cash", "2000")
                await repo.set("savings", "500")
                raise RuntimeError("boom")

        assert await repo.get("cash") == "1000"
        assert await repo.get("savings") is None


@pytest.mark.unit
class TestBuildEngine:
    def test_sqlite_skips_pool_sizing(self) -> None:
        engine = build_engine("sqlite+aiosqlite:///:memory:")

        assert engine.url.drivername == "sqlite+aiosqlite"

    def test_overrides_are_forwarded(self) -> None:
        engine = build_engine("sqlite+aiosqlite:///:memory:", echo=True)

        assert engine.echo is True
