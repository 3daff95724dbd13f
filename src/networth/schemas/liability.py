"""Liability schemas."""

import datetime as dt
import enum
from decimal import Decimal

from pydantic import Field, model_validator

from networth.schemas.base import CamelModel


class LiabilityType(str, enum.Enum):
    """Kinds of debt the tracker knows about."""

    LOAN = "LOAN"
    CREDIT_CARD = "CREDIT_CARD"
    PAYABLE = "PAYABLE"
    COMMITTED_EXPENSE = "COMMITTED_EXPENSE"
    MORTGAGE = "MORTGAGE"
    PERSONAL_LOAN = "PERSONAL_LOAN"
    STUDENT_LOAN = "STUDENT_LOAN"
    CAR_LOAN = "CAR_LOAN"
    OTHER = "OTHER"


class LiabilityCategory(str, enum.Enum):
    """Whether the debt is backed by collateral."""

    SECURED = "SECURED"
    UNSECURED = "UNSECURED"


class LiabilityTerm(str, enum.Enum):
    """Repayment horizon."""

    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"


class LiabilityBase(CamelModel):
    """Base liability schema."""

    name: str = Field(..., min_length=1, max_length=200)
    type: LiabilityType
    category: LiabilityCategory
    term: LiabilityTerm
    original_amount: Decimal = Field(..., ge=0)
    current_balance: Decimal = Field(..., ge=0)
    interest_rate: Decimal = Field(Decimal("0"), ge=0)
    monthly_payment: Decimal = Field(Decimal("0"), ge=0)
    start_date: dt.date
    end_date: dt.date | None = None
    currency: str = Field("INR", min_length=3, max_length=3, pattern="^[A-Z]{3}$")
    lender: str | None = None
    description: str | None = None
    is_active: bool = True

    @model_validator(mode="after")
    def validate_balance(self) -> "LiabilityBase":
        """Outstanding balance can never exceed the amount originally owed."""
        if self.current_balance > self.original_amount:
            raise ValueError("currentBalance cannot exceed originalAmount")
        return self


class LiabilityCreate(LiabilityBase):
    """Schema for adding a liability."""

    pass


class LiabilityUpdate(CamelModel):
    """Schema for editing a liability.

    Balance bounds are checked against the merged result by the service,
    since either side of the comparison may be omitted here.
    """

    name: str | None = Field(None, min_length=1, max_length=200)
    type: LiabilityType | None = None
    category: LiabilityCategory | None = None
    term: LiabilityTerm | None = None
    original_amount: Decimal | None = Field(None, ge=0)
    current_balance: Decimal | None = Field(None, ge=0)
    interest_rate: Decimal | None = Field(None, ge=0)
    monthly_payment: Decimal | None = Field(None, ge=0)
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    currency: str | None = Field(None, min_length=3, max_length=3, pattern="^[A-Z]{3}$")
    lender: str | None = None
    description: str | None = None
    is_active: bool | None = None


class Liability(LiabilityBase):
    """A stored liability."""

    id: str


class LiabilityMetrics(CamelModel):
    """Totals over a list of liabilities."""

    total_liabilities: Decimal = Decimal("0")
    secured_liabilities: Decimal = Decimal("0")
    unsecured_liabilities: Decimal = Decimal("0")
    short_term_liabilities: Decimal = Decimal("0")
    long_term_liabilities: Decimal = Decimal("0")
    monthly_payments: Decimal = Decimal("0")
    average_interest_rate: Decimal = Decimal("0")
