"""Transaction ledger and portfolio operations.

The ledger is the source of truth. Every mutation re-derives holdings and
metrics and saves the whole container in one transaction, so the stored
holdings never disagree with the stored transactions.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from networth.core.config import settings
from networth.core.exceptions import AppException, NotFoundError, ValidationError
from networth.db.session import transactional
from networth.repositories.portfolio_store import PortfolioStore, parse_portfolio_document
from networth.schemas.portfolio import (
    Holding,
    ImportSummary,
    Portfolio,
    PortfolioMetrics,
    PortfolioResponse,
    RefreshResponse,
)
from networth.schemas.transaction import Transaction, TransactionCreate, TransactionUpdate
from networth.services.portfolio_calculations import compute_metrics, derive_holdings, is_stale
from networth.services.quote_service import QuoteProvider
from networth.services.refresh_service import refresh_portfolio

logger = logging.getLogger(__name__)


def rebuild(portfolio: Portfolio, transactions: list[Transaction]) -> Portfolio:
    """Return a copy of the container with holdings and metrics derived from ``transactions``."""
    holdings = derive_holdings(transactions)
    return portfolio.model_copy(
        update={
            "transactions": transactions,
            "holdings": holdings,
            "metrics": compute_metrics(holdings),
            "last_updated": datetime.now(UTC),
        }
    )


async def _save(store: PortfolioStore, portfolio: Portfolio) -> Portfolio:
    # The container carries a copy of the assets list
    portfolio = portfolio.model_copy(update={"assets": await store.load_assets()})
    await store.save_portfolio(portfolio)
    return portfolio


def _find(transactions: list[Transaction], transaction_id: str) -> int:
    for index, tx in enumerate(transactions):
        if tx.id == transaction_id:
            return index
    raise NotFoundError(f"Transaction {transaction_id} not found")


async def get_portfolio(store: PortfolioStore) -> PortfolioResponse:
    """Load the container and flag prices older than the staleness threshold."""
    portfolio = await store.load_portfolio()
    return PortfolioResponse(
        **portfolio.model_dump(),
        has_stale_data=is_stale(portfolio.last_refresh_time, settings.STALE_DATA_THRESHOLD_HOURS),
    )


async def get_holdings(store: PortfolioStore) -> list[Holding]:
    portfolio = await store.load_portfolio()
    return portfolio.holdings


async def get_metrics(store: PortfolioStore) -> PortfolioMetrics:
    portfolio = await store.load_portfolio()
    return portfolio.metrics


async def list_transactions(store: PortfolioStore) -> list[Transaction]:
    portfolio = await store.load_portfolio()
    return portfolio.transactions


async def get_transaction(store: PortfolioStore, transaction_id: str) -> Transaction:
    """
    Look up one transaction.

    Raises:
        NotFoundError: If no transaction has this id
    """
    transactions = await list_transactions(store)
    return transactions[_find(transactions, transaction_id)]


async def add_transaction(store: PortfolioStore, data: TransactionCreate) -> Transaction:
    """
    Append a transaction to the ledger.

    The new entry gets a fresh opaque id and goes to the end of the ledger.
    A sell larger than the position is accepted; the holding is clamped to
    zero when derived.

    Args:
        store: Portfolio store bound to the request session
        data: Transaction fields

    Returns:
        The stored transaction
    """
    transaction = Transaction(id=str(uuid.uuid4()), **data.model_dump())

    async with transactional(store.db):
        portfolio = await store.load_portfolio(for_update=True)
        portfolio = rebuild(portfolio, [*portfolio.transactions, transaction])
        await _save(store, portfolio)

    logger.info(
        f"Recorded {transaction.type.value} {transaction.quantity} {transaction.symbol} "
        f"@ {transaction.price} ({transaction.id})"
    )
    return transaction


async def update_transaction(
    store: PortfolioStore, transaction_id: str, data: TransactionUpdate
) -> Transaction:
    """
    Edit a transaction in place, keeping its id and ledger position.

    Raises:
        NotFoundError: If no transaction has this id
    """
    async with transactional(store.db):
        portfolio = await store.load_portfolio(for_update=True)
        transactions = list(portfolio.transactions)
        index = _find(transactions, transaction_id)

        merged = transactions[index].model_dump()
        merged.update(data.model_dump(exclude_unset=True))
        updated = Transaction.model_validate(merged)
        transactions[index] = updated

        await _save(store, rebuild(portfolio, transactions))

    logger.info(f"Updated transaction {transaction_id} ({updated.symbol})")
    return updated


async def delete_transaction(store: PortfolioStore, transaction_id: str) -> None:
    """
    Remove a transaction from the ledger.

    Raises:
        NotFoundError: If no transaction has this id
    """
    async with transactional(store.db):
        portfolio = await store.load_portfolio(for_update=True)
        transactions = list(portfolio.transactions)
        removed = transactions.pop(_find(transactions, transaction_id))
        await _save(store, rebuild(portfolio, transactions))

    logger.info(f"Deleted transaction {transaction_id} ({removed.symbol})")


async def refresh(store: PortfolioStore, provider: QuoteProvider) -> RefreshResponse:
    """
    Refresh prices for every symbol in the ledger.

    The provider's bulk step runs first. If it fails, its message is returned
    in ``error`` together with the stored holdings and metrics, and nothing
    is written. Otherwise quotes are fetched per symbol, the revalued
    holdings and metrics are saved and the refresh time is stamped. The
    ledger is re-read under lock before saving, and the quotes are applied to
    it again if it changed while they were in flight.

    Args:
        store: Portfolio store bound to the request session
        provider: Quote source

    Returns:
        RefreshResponse; never raises for upstream failures
    """
    portfolio = await store.load_portfolio()

    try:
        await provider.refresh_all_data()
    except AppException as e:
        logger.error(f"Bulk refresh failed, keeping stored prices: {e.detail}")
        return RefreshResponse(
            holdings=portfolio.holdings,
            metrics=portfolio.metrics,
            last_refresh_time=portfolio.last_refresh_time,
            error=e.detail,
        )

    result = await refresh_portfolio(portfolio.transactions, provider)
    now = datetime.now(UTC)

    async with transactional(store.db):
        # The ledger may have changed while quotes were in flight
        current = await store.load_portfolio(for_update=True)
        holdings, metrics = result.holdings, result.metrics
        if current.transactions != portfolio.transactions:
            holdings, metrics = result.revalue(current.transactions)
        updated = current.model_copy(
            update={
                "holdings": holdings,
                "metrics": metrics,
                "last_updated": now,
                "last_refresh_time": now,
            }
        )
        await _save(store, updated)

    return RefreshResponse(
        holdings=holdings,
        metrics=metrics,
        last_refresh_time=now,
        refreshed_symbols=result.refreshed_symbols,
        failed_symbols=result.failed_symbols,
    )


async def import_portfolio(store: PortfolioStore, document: dict[str, Any]) -> ImportSummary:
    """
    Replace the stored container with an uploaded one.

    Accepts the current format or the legacy ``{stocks: [...]}`` format.
    Holdings and metrics are always re-derived from the imported ledger
    rather than trusted from the upload.

    Raises:
        ValidationError: If the document matches neither format
    """
    try:
        imported, migrated = parse_portfolio_document(document)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Not a portfolio document: {e.error_count()} validation errors"
        ) from e
    portfolio = rebuild(Portfolio(), list(imported.transactions))

    async with transactional(store.db):
        portfolio = await _save(store, portfolio)

    logger.info(
        f"Imported portfolio with {len(portfolio.transactions)} transactions"
        f"{' (migrated from legacy format)' if migrated else ''}"
    )
    return ImportSummary(
        migrated=migrated,
        transaction_count=len(portfolio.transactions),
        holding_count=len(portfolio.holdings),
        metrics=portfolio.metrics,
    )
