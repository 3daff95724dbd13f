"""Liability endpoints."""

from fastapi import APIRouter, status

from networth.core.deps import StoreDep
from networth.schemas.liability import (
    Liability,
    LiabilityCreate,
    LiabilityMetrics,
    LiabilityUpdate,
)
from networth.services import liability_service

router = APIRouter()


@router.get("", response_model=list[Liability])
async def list_liabilities(store: StoreDep) -> list[Liability]:
    """Get all liabilities, active and inactive."""
    return await liability_service.list_liabilities(store)


@router.post("", response_model=Liability, status_code=status.HTTP_201_CREATED)
async def create_liability(liability: LiabilityCreate, store: StoreDep) -> Liability:
    """
    Add a liability.

    ``currentBalance`` must lie between 0 and ``originalAmount``.
    """
    return await liability_service.create_liability(store, liability)


@router.get("/metrics", response_model=LiabilityMetrics)
async def get_liability_metrics(store: StoreDep) -> LiabilityMetrics:
    """Get outstanding totals by category and term, monthly payments and mean rate."""
    return await liability_service.get_liability_metrics(store)


@router.get("/{liability_id}", response_model=Liability)
async def get_liability(liability_id: str, store: StoreDep) -> Liability:
    return await liability_service.get_liability(store, liability_id)


@router.put("/{liability_id}", response_model=Liability)
async def update_liability(
    liability_id: str,
    liability: LiabilityUpdate,
    store: StoreDep,
) -> Liability:
    """
    Edit a liability.

    Raises:
        NotFoundError: If the liability does not exist
        ValidationError: If the result breaks the balance bounds
    """
    return await liability_service.update_liability(store, liability_id, liability)


@router.delete("/{liability_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_liability(liability_id: str, store: StoreDep) -> None:
    await liability_service.delete_liability(store, liability_id)
