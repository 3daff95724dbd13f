"""Liability totals and debt ratios."""

from collections.abc import Sequence
from decimal import Decimal

from networth.schemas.liability import (
    Liability,
    LiabilityCategory,
    LiabilityMetrics,
    LiabilityTerm,
    LiabilityType,
)
from networth.services.portfolio_calculations import ZERO, percent_of

LIABILITY_TYPE_DISPLAY_NAMES = {
    LiabilityType.LOAN: "Loan",
    LiabilityType.CREDIT_CARD: "Credit Card",
    LiabilityType.PAYABLE: "Payable",
    LiabilityType.COMMITTED_EXPENSE: "Committed Expense",
    LiabilityType.MORTGAGE: "Mortgage",
    LiabilityType.PERSONAL_LOAN: "Personal Loan",
    LiabilityType.STUDENT_LOAN: "Student Loan",
    LiabilityType.CAR_LOAN: "Car Loan",
    LiabilityType.OTHER: "Other",
}


def _balance_sum(liabilities: Sequence[Liability]) -> Decimal:
    return sum((item.current_balance for item in liabilities), ZERO)


def compute_liability_metrics(liabilities: Sequence[Liability]) -> LiabilityMetrics:
    """
    Sum outstanding balances overall, per category and per term.

    The average interest rate is the plain mean over liabilities, not
    weighted by balance.

    Args:
        liabilities: Liabilities to aggregate (inactive ones included)

    Returns:
        LiabilityMetrics; all zero for an empty list
    """
    secured = [item for item in liabilities if item.category == LiabilityCategory.SECURED]
    unsecured = [item for item in liabilities if item.category == LiabilityCategory.UNSECURED]
    short_term = [item for item in liabilities if item.term == LiabilityTerm.SHORT_TERM]
    long_term = [item for item in liabilities if item.term == LiabilityTerm.LONG_TERM]

    average_rate = ZERO
    if liabilities:
        average_rate = sum((item.interest_rate for item in liabilities), ZERO) / len(liabilities)

    return LiabilityMetrics(
        total_liabilities=_balance_sum(liabilities),
        secured_liabilities=_balance_sum(secured),
        unsecured_liabilities=_balance_sum(unsecured),
        short_term_liabilities=_balance_sum(short_term),
        long_term_liabilities=_balance_sum(long_term),
        monthly_payments=sum((item.monthly_payment for item in liabilities), ZERO),
        average_interest_rate=average_rate,
    )


def liability_type_display_name(liability_type: LiabilityType | str) -> str:
    """Human-readable label for a liability type; unknown values pass through."""
    try:
        return LIABILITY_TYPE_DISPLAY_NAMES[LiabilityType(liability_type)]
    except ValueError:
        return str(liability_type)


def debt_to_income_ratio(monthly_payments: Decimal, monthly_income: Decimal) -> Decimal:
    """Monthly debt service as a percentage of monthly income (0 without income)."""
    return percent_of(monthly_payments, monthly_income)


def debt_to_asset_ratio(total_liabilities: Decimal, total_assets: Decimal) -> Decimal:
    """Total liabilities as a percentage of total assets (0 without assets)."""
    return percent_of(total_liabilities, total_assets)
