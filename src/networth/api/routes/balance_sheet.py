"""Scalar balances and balance sheet endpoints."""

from fastapi import APIRouter

from networth.core.deps import StoreDep
from networth.schemas.balance_sheet import Balances, BalanceSheet, BalancesUpdate
from networth.services import balance_sheet_service

router = APIRouter()


@router.get("/balances", response_model=Balances)
async def get_balances(store: StoreDep) -> Balances:
    """Get cash, other assets and other liabilities."""
    return await balance_sheet_service.get_balances(store)


@router.put("/balances", response_model=Balances)
async def update_balances(balances: BalancesUpdate, store: StoreDep) -> Balances:
    """
    Set any of cash, other assets and other liabilities.

    Omitted values keep their stored amount.
    """
    return await balance_sheet_service.update_balances(store, balances)


@router.get("/balance-sheet", response_model=BalanceSheet)
async def get_balance_sheet(store: StoreDep) -> BalanceSheet:
    """
    Compose the balance sheet from holdings, assets, liabilities and balances.

    Net worth = total assets - total liabilities. Nothing is stored.
    """
    return await balance_sheet_service.build_balance_sheet(store)
