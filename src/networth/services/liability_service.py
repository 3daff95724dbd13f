"""Liability operations."""

import logging
import uuid

from pydantic import ValidationError as PydanticValidationError

from networth.core.exceptions import NotFoundError, ValidationError
from networth.db.session import transactional
from networth.repositories.portfolio_store import PortfolioStore
from networth.schemas.liability import (
    Liability,
    LiabilityCreate,
    LiabilityMetrics,
    LiabilityUpdate,
)
from networth.services.liability_calculations import compute_liability_metrics

logger = logging.getLogger(__name__)


def _find(liabilities: list[Liability], liability_id: str) -> int:
    for index, item in enumerate(liabilities):
        if item.id == liability_id:
            return index
    raise NotFoundError(f"Liability {liability_id} not found")


async def list_liabilities(store: PortfolioStore) -> list[Liability]:
    return await store.load_liabilities()


async def get_liability(store: PortfolioStore, liability_id: str) -> Liability:
    liabilities = await store.load_liabilities()
    return liabilities[_find(liabilities, liability_id)]


async def get_liability_metrics(store: PortfolioStore) -> LiabilityMetrics:
    return compute_liability_metrics(await store.load_liabilities())


async def create_liability(store: PortfolioStore, data: LiabilityCreate) -> Liability:
    """
    Add a liability with a fresh id.

    Args:
        store: Portfolio store bound to the request session
        data: Liability fields (balance bounds already validated)

    Returns:
        The stored liability
    """
    liability = Liability(id=str(uuid.uuid4()), **data.model_dump())

    async with transactional(store.db):
        liabilities = await store.load_liabilities(for_update=True)
        liabilities.append(liability)
        await store.save_liabilities(liabilities)

    logger.info(f"Added liability {liability.id} ({liability.type.value}, {liability.name})")
    return liability


async def update_liability(
    store: PortfolioStore, liability_id: str, data: LiabilityUpdate
) -> Liability:
    """
    Apply a partial update to a liability.

    The balance bounds are checked on the merged result, so lowering the
    original amount below the stored balance is rejected too.

    Raises:
        NotFoundError: If no liability has this id
        ValidationError: If the merged liability breaks the balance bounds
    """
    async with transactional(store.db):
        liabilities = await store.load_liabilities(for_update=True)
        index = _find(liabilities, liability_id)

        merged = liabilities[index].model_dump()
        merged.update(data.model_dump(exclude_unset=True))
        try:
            updated = Liability.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(e.errors()[0]["msg"]) from e

        liabilities[index] = updated
        await store.save_liabilities(liabilities)

    logger.info(f"Updated liability {liability_id}")
    return updated


async def delete_liability(store: PortfolioStore, liability_id: str) -> None:
    """
    Remove a liability.

    Raises:
        NotFoundError: If no liability has this id
    """
    async with transactional(store.db):
        liabilities = await store.load_liabilities(for_update=True)
        liabilities.pop(_find(liabilities, liability_id))
        await store.save_liabilities(liabilities)

    logger.info(f"Deleted liability {liability_id}")
