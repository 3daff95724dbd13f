"""Miscellaneous asset endpoints."""

from fastapi import APIRouter, status

from networth.core.deps import PricePerGramDep, StoreDep
from networth.schemas.asset import Asset, AssetCreate, AssetSummary, AssetUpdate
from networth.services import asset_service

router = APIRouter()


@router.get("", response_model=list[Asset])
async def list_assets(store: StoreDep) -> list[Asset]:
    """Get all miscellaneous assets."""
    return await asset_service.list_assets(store)


@router.post("", response_model=Asset, status_code=status.HTTP_201_CREATED)
async def create_asset(
    asset: AssetCreate,
    store: StoreDep,
    price_per_gram: PricePerGramDep,
) -> Asset:
    """
    Add an asset.

    The ``details.type`` tag selects the asset kind and its fields. Gold and
    silver are valued at weight x live INR price per gram; for them
    ``currentValue`` may be omitted and is ignored if sent.

    Raises:
        UpstreamError: If a metal price cannot be fetched (502)

    Example:
        POST /api/v1/assets
        {"name": "Gold coins", "details": {"type": "GOLD", "weightGrams": 20}}
    """
    return await asset_service.create_asset(store, asset, price_per_gram)


@router.get("/summary", response_model=AssetSummary)
async def get_asset_summary(store: StoreDep) -> AssetSummary:
    """Get total value, cost basis and gain/loss of all assets."""
    return await asset_service.get_asset_summary(store)


@router.post("/revalue-metals", response_model=list[Asset])
async def revalue_metals(store: StoreDep, price_per_gram: PricePerGramDep) -> list[Asset]:
    """
    Reprice gold and silver assets at the live rate.

    A metal whose price is unavailable keeps its stored value.
    """
    return await asset_service.revalue_metals(store, price_per_gram)


@router.get("/{asset_id}", response_model=Asset)
async def get_asset(asset_id: str, store: StoreDep) -> Asset:
    return await asset_service.get_asset(store, asset_id)


@router.put("/{asset_id}", response_model=Asset)
async def update_asset(
    asset_id: str,
    asset: AssetUpdate,
    store: StoreDep,
    price_per_gram: PricePerGramDep,
) -> Asset:
    """Edit an asset; metals are revalued after the edit."""
    return await asset_service.update_asset(store, asset_id, asset, price_per_gram)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(asset_id: str, store: StoreDep) -> None:
    await asset_service.delete_asset(store, asset_id)
