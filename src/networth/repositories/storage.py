"""Key/value repository over the storage_entries table."""

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from networth.models.storage_entry import StorageEntry


def locking_select(key: str) -> Select[tuple[StorageEntry]]:
    """``SELECT ... FOR UPDATE`` of one entry, refreshing any cached instance.

    SQLite has no row locks and compiles this without the FOR UPDATE clause;
    its writers are serialized by the database lock instead.
    """
    return (
        select(StorageEntry)
        .where(StorageEntry.key == key)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


class KeyValueRepository:
    """Raw string storage addressed by key.

    Values are opaque text; serialization belongs to the caller. Like the
    other repositories it never commits, the caller owns the transaction.

    Example:
        >>> repo = KeyValueRepository(db)
        >>> await repo.set("cash", "1000")
        >>> await db.commit()
        >>> await repo.get("cash")
        '1000'
    """

    def __init__(self, db: AsyncSession):
        """Initialize repository.

        Args:
            db: Async database session
        """
        self.db = db

    async def get(self, key: str, *, for_update: bool = False) -> str | None:
        """Get the value stored under ``key``, or None if absent.

        Args:
            key: Storage key
            for_update: Lock the row until the caller's transaction ends and
                read its latest committed value. Used by read-modify-write
                paths so concurrent writers queue instead of overwriting
                each other.
        """
        if not for_update:
            entry = await self.db.get(StorageEntry, key)
        else:
            result = await self.db.execute(locking_select(key))
            entry = result.scalar_one_or_none()
        return entry.value if entry is not None else None

    async def set(self, key: str, value: str) -> None:
        """Insert or overwrite the value stored under ``key``.

        Note:
            Caller must commit the transaction.
        """
        entry = await self.db.get(StorageEntry, key)
        if entry is None:
            self.db.add(StorageEntry(key=key, value=value))
        else:
            entry.value = value
        await self.db.flush()
