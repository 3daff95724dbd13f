"""Transaction schemas."""

import datetime as dt
import enum
from decimal import Decimal

from pydantic import Field, field_validator

from networth.schemas.base import CamelModel


class TransactionType(str, enum.Enum):
    """Side of a ledger entry."""

    BUY = "BUY"
    SELL = "SELL"


class TransactionBase(CamelModel):
    """Base transaction schema."""

    symbol: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=200)
    type: TransactionType
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    date: dt.date
    currency: str = Field("INR", min_length=3, max_length=3, pattern="^[A-Z]{3}$")
    exchange: str = Field("NSE", min_length=1, max_length=16)
    notes: str | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """Symbols are stored upper-case so grouping is case-insensitive."""
        return v.strip().upper()


class TransactionCreate(TransactionBase):
    """Schema for recording a transaction."""

    pass


class TransactionUpdate(CamelModel):
    """Schema for editing a transaction; every field but the id may change."""

    symbol: str | None = Field(None, min_length=1, max_length=32)
    name: str | None = Field(None, min_length=1, max_length=200)
    type: TransactionType | None = None
    quantity: Decimal | None = Field(None, gt=0)
    price: Decimal | None = Field(None, ge=0)
    date: dt.date | None = None
    currency: str | None = Field(None, min_length=3, max_length=3, pattern="^[A-Z]{3}$")
    exchange: str | None = Field(None, min_length=1, max_length=16)
    notes: str | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str | None) -> str | None:
        """Symbols are stored upper-case so grouping is case-insensitive."""
        return v.strip().upper() if v is not None else v


class Transaction(TransactionBase):
    """A recorded buy or sell event."""

    id: str
