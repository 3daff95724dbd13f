"""Key/value storage entry model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from networth.db.base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    """One persisted value, addressed by a string key.

    Values are JSON documents (or plain decimal strings for the scalar
    balances) exactly as serialized by the store; the table knows nothing
    about their shape.

    Attributes:
        key: Storage key (e.g. "stock-portfolio", "liabilities", "cash")
        value: Serialized value
        created_at: When the key was first written
        updated_at: When the key was last written
    """

    __tablename__ = "storage_entries"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
