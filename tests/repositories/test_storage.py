"""Tests for the key/value repository."""

import pytest
from sqlalchemy import update
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession

from networth.db.session import transactional
from networth.models.storage_entry import StorageEntry
from networth.repositories.storage import KeyValueRepository, locking_select

pytestmark = pytest.mark.integration


async def test_get_missing_key(test_db: AsyncSession) -> None:
    repo = KeyValueRepository(test_db)

    assert await repo.get("cash") is None
    assert await repo.get("cash", for_update=True) is None


async def test_set_inserts_then_overwrites(test_db: AsyncSession) -> None:
    repo = KeyValueRepository(test_db)

    async with transactional(test_db):
        await repo.set("cash", "100")
    async with transactional(test_db):
        await repo.set("cash", "250")

    assert await repo.get("cash") == "250"


async def test_rollback_discards_uncommitted_value(test_db: AsyncSession) -> None:
    repo = KeyValueRepository(test_db)
    async with transactional(test_db):
        await repo.set("cash", "100")

    with pytest.raises(RuntimeError):
        async with transactional(test_db):
            await repo.set("cash", "999")
            raise RuntimeError("boom")

    assert await repo.get("cash") == "100"


async def test_locking_read_sees_latest_row(test_db: AsyncSession) -> None:
    """A locking read bypasses the session's cached copy of the entry."""
    repo = KeyValueRepository(test_db)
    async with transactional(test_db):
        await repo.set("liabilities", "[]")

    # Another writer changes the row behind the session's back
    await test_db.execute(
        update(StorageEntry)
        .where(StorageEntry.key == "liabilities")
        .values(value='[{"id": "x"}]')
        .execution_options(synchronize_session=False)
    )

    assert await repo.get("liabilities") == "[]"
    assert await repo.get("liabilities", for_update=True) == '[{"id": "x"}]'


@pytest.mark.unit
def test_locking_select_locks_row_on_postgresql() -> None:
    sql = str(locking_select("stock-portfolio").compile(dialect=postgresql.dialect()))

    assert "FOR UPDATE" in sql
    assert "storage_entries.key = " in sql
