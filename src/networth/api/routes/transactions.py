"""Transaction ledger endpoints."""

from fastapi import APIRouter, status

from networth.core.deps import StoreDep
from networth.schemas.transaction import Transaction, TransactionCreate, TransactionUpdate
from networth.services import portfolio_service

router = APIRouter()


@router.get("", response_model=list[Transaction])
async def list_transactions(store: StoreDep) -> list[Transaction]:
    """
    Get the whole ledger in storage order.

    Returns:
        List of transactions
    """
    return await portfolio_service.list_transactions(store)


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(transaction: TransactionCreate, store: StoreDep) -> Transaction:
    """
    Record a buy or sell.

    Holdings and metrics are re-derived and saved with the new entry.

    Args:
        transaction: Transaction fields (id is assigned by the server)
        store: Portfolio store

    Returns:
        The stored transaction

    Example:
        POST /api/v1/transactions
        {"symbol": "TCS", "name": "Tata Consultancy Services", "type": "BUY",
         "quantity": 10, "price": 3850.25, "date": "2024-01-15"}
    """
    return await portfolio_service.add_transaction(store, transaction)


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(transaction_id: str, store: StoreDep) -> Transaction:
    """Get one transaction by id (404 if unknown)."""
    return await portfolio_service.get_transaction(store, transaction_id)


@router.put("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    transaction: TransactionUpdate,
    store: StoreDep,
) -> Transaction:
    """
    Edit a transaction.

    Only supplied fields change; the id and ledger position are kept.

    Raises:
        NotFoundError: If the transaction does not exist
    """
    return await portfolio_service.update_transaction(store, transaction_id, transaction)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: str, store: StoreDep) -> None:
    """Delete a transaction and re-derive holdings."""
    await portfolio_service.delete_transaction(store, transaction_id)
