"""Typed access to the persisted portfolio, liabilities, assets and balances.

Every entity lives under its own storage key as a JSON document (scalar
balances as plain decimal strings). Reads are forgiving: a value that
cannot be parsed is logged and treated as absent, so one corrupted entry
never takes down the rest of the application.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from networth.core.constants import StorageKeys
from networth.repositories.storage import KeyValueRepository
from networth.schemas.asset import Asset
from networth.schemas.liability import Liability
from networth.schemas.portfolio import LegacyPortfolio, Portfolio
from networth.services.portfolio_calculations import (
    compute_metrics,
    derive_holdings,
    migrate_legacy_stocks,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_liabilities_adapter = TypeAdapter(list[Liability])
_assets_adapter = TypeAdapter(list[Asset])


def parse_portfolio_document(document: Any) -> tuple[Portfolio, bool]:
    """
    Build a Portfolio from a decoded container, migrating the legacy format.

    A container holding ``stocks`` instead of ``transactions`` predates the
    ledger; its positions become BUY transactions and the holdings and
    metrics are re-derived from them.

    Args:
        document: Decoded JSON object

    Returns:
        Tuple of (portfolio, migrated)

    Raises:
        pydantic.ValidationError: If the document matches neither format
    """
    if isinstance(document, dict) and "stocks" in document and "transactions" not in document:
        legacy = LegacyPortfolio.model_validate(document)
        transactions = migrate_legacy_stocks(legacy.stocks)
        holdings = derive_holdings(transactions)
        portfolio = Portfolio(
            holdings=holdings,
            transactions=transactions,
            metrics=compute_metrics(holdings),
        )
        logger.info(f"Migrated legacy portfolio with {len(transactions)} positions")
        return portfolio, True

    return Portfolio.model_validate(document), False


class PortfolioStore:
    """Persistence gateway for everything the tracker stores.

    Wraps a KeyValueRepository with one load/save pair per entity. Like the
    repositories, it never commits.

    Documents are rewritten whole, so a load that precedes a save of the
    same key must pass ``for_update=True`` inside the writing transaction.
    The scalar balances are blind writes and need no lock.

    Example:
        >>> store = PortfolioStore(db)
        >>> async with transactional(db):
        ...     portfolio = await store.load_portfolio(for_update=True)
        ...     await store.save_portfolio(portfolio)
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.kv = KeyValueRepository(db)

    async def _load_json(
        self, key: str, adapter: TypeAdapter[T], default: T, for_update: bool = False
    ) -> T:
        raw = await self.kv.get(key, for_update=for_update)
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring unreadable value stored under '{key}': {e}")
            return default

    async def _save_json(self, key: str, adapter: TypeAdapter[T], value: T) -> None:
        await self.kv.set(key, adapter.dump_json(value, by_alias=True).decode())

    async def _load_decimal(self, key: str) -> Decimal:
        raw = await self.kv.get(key)
        if raw is None:
            return Decimal("0")
        try:
            return Decimal(json.loads(raw) if raw.startswith('"') else raw)
        except (InvalidOperation, ValueError, TypeError) as e:
            logger.warning(f"Ignoring unreadable value stored under '{key}': {e}")
            return Decimal("0")

    async def _save_decimal(self, key: str, value: Decimal) -> None:
        await self.kv.set(key, str(value))

    # Portfolio container

    async def load_portfolio(self, *, for_update: bool = False) -> Portfolio:
        """
        Load the portfolio container.

        Returns an empty portfolio when nothing is stored or the stored value
        is unreadable. Legacy containers are migrated in memory; they are
        written back in the current format on the next save.
        """
        raw = await self.kv.get(StorageKeys.PORTFOLIO, for_update=for_update)
        if raw is None:
            return Portfolio()
        try:
            portfolio, _ = parse_portfolio_document(json.loads(raw))
            return portfolio
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"Ignoring unreadable portfolio under '{StorageKeys.PORTFOLIO}': {e}")
            return Portfolio()

    async def save_portfolio(self, portfolio: Portfolio) -> None:
        await self.kv.set(StorageKeys.PORTFOLIO, portfolio.model_dump_json(by_alias=True))

    # Itemised lists

    async def load_liabilities(self, *, for_update: bool = False) -> list[Liability]:
        return await self._load_json(
            StorageKeys.LIABILITIES, _liabilities_adapter, [], for_update
        )

    async def save_liabilities(self, liabilities: list[Liability]) -> None:
        await self._save_json(StorageKeys.LIABILITIES, _liabilities_adapter, liabilities)

    async def load_assets(self, *, for_update: bool = False) -> list[Asset]:
        return await self._load_json(StorageKeys.ASSETS, _assets_adapter, [], for_update)

    async def save_assets(self, assets: list[Asset]) -> None:
        await self._save_json(StorageKeys.ASSETS, _assets_adapter, assets)

    # Scalar balances

    async def load_cash(self) -> Decimal:
        return await self._load_decimal(StorageKeys.CASH)

    async def save_cash(self, value: Decimal) -> None:
        await self._save_decimal(StorageKeys.CASH, value)

    async def load_other_assets(self) -> Decimal:
        return await self._load_decimal(StorageKeys.OTHER_ASSETS)

    async def save_other_assets(self, value: Decimal) -> None:
        await self._save_decimal(StorageKeys.OTHER_ASSETS, value)

    async def load_other_liabilities(self) -> Decimal:
        return await self._load_decimal(StorageKeys.OTHER_LIABILITIES)

    async def save_other_liabilities(self, value: Decimal) -> None:
        await self._save_decimal(StorageKeys.OTHER_LIABILITIES, value)
