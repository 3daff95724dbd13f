"""Miscellaneous asset operations.

Gold and silver are valued from the live INR-per-gram price whenever they
are saved or revalued; a value supplied by the user is ignored for them.
Every change to the asset list is mirrored into the portfolio container.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from networth.core.constants import MetalConstants
from networth.core.exceptions import AppException, NotFoundError, ValidationError
from networth.db.session import transactional
from networth.repositories.portfolio_store import PortfolioStore
from networth.schemas.asset import Asset, AssetCreate, AssetSummary, AssetType, AssetUpdate
from networth.services import metal_price_service
from networth.services.balance_sheet_service import summarize_assets

logger = logging.getLogger(__name__)

PricePerGram = Callable[[str], Awaitable[Decimal]]

_METAL_SYMBOLS = {
    AssetType.GOLD.value: MetalConstants.GOLD_SYMBOL,
    AssetType.SILVER.value: MetalConstants.SILVER_SYMBOL,
}


async def metal_value(asset: Asset | AssetCreate, price_per_gram: PricePerGram) -> Decimal:
    """
    Current INR value of a gold or silver asset.

    Raises:
        UpstreamError: If the live price cannot be fetched
    """
    rate = await price_per_gram(_METAL_SYMBOLS[asset.details.type])
    return asset.details.weight_grams * rate


def _find(assets: list[Asset], asset_id: str) -> int:
    for index, item in enumerate(assets):
        if item.id == asset_id:
            return index
    raise NotFoundError(f"Asset {asset_id} not found")


def _apply_metal_rates(assets: list[Asset], rates: dict[str, Decimal]) -> list[Asset]:
    now = datetime.now(UTC)
    return [
        asset.model_copy(
            update={
                "current_value": asset.details.weight_grams * rates[asset.details.type],
                "last_updated": now,
            }
        )
        if asset.details.type in rates
        else asset
        for asset in assets
    ]


async def _save(store: PortfolioStore, assets: list[Asset]) -> None:
    await store.save_assets(assets)
    portfolio = await store.load_portfolio(for_update=True)
    await store.save_portfolio(portfolio.model_copy(update={"assets": assets}))


async def list_assets(store: PortfolioStore) -> list[Asset]:
    return await store.load_assets()


async def get_asset(store: PortfolioStore, asset_id: str) -> Asset:
    assets = await store.load_assets()
    return assets[_find(assets, asset_id)]


async def get_asset_summary(store: PortfolioStore) -> AssetSummary:
    return summarize_assets(await store.load_assets())


async def create_asset(
    store: PortfolioStore,
    data: AssetCreate,
    price_per_gram: PricePerGram = metal_price_service.get_inr_per_gram,
) -> Asset:
    """
    Add an asset.

    Args:
        store: Portfolio store bound to the request session
        data: Asset fields
        price_per_gram: Live INR-per-gram lookup for metals

    Returns:
        The stored asset

    Raises:
        UpstreamError: If a metal asset cannot be priced
    """
    fields = data.model_dump()
    if data.is_metal:
        fields["current_value"] = await metal_value(data, price_per_gram)

    asset = Asset(id=str(uuid.uuid4()), last_updated=datetime.now(UTC), **fields)

    async with transactional(store.db):
        assets = await store.load_assets(for_update=True)
        assets.append(asset)
        await _save(store, assets)

    logger.info(f"Added asset {asset.id} ({asset.type}, value {asset.current_value})")
    return asset


async def update_asset(
    store: PortfolioStore,
    asset_id: str,
    data: AssetUpdate,
    price_per_gram: PricePerGram = metal_price_service.get_inr_per_gram,
) -> Asset:
    """
    Apply a partial update to an asset.

    Replacing ``details`` may change the asset's type. Metals are revalued
    from the live price after the update.

    Raises:
        NotFoundError: If no asset has this id
        ValidationError: If the merged asset is invalid
        UpstreamError: If a metal asset cannot be priced
    """
    assets = await store.load_assets()
    index = _find(assets, asset_id)

    merged = assets[index].model_dump()
    merged.update(data.model_dump(exclude_unset=True))
    merged["last_updated"] = datetime.now(UTC)
    try:
        updated = Asset.model_validate(merged)
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"]) from e

    if updated.is_metal:
        updated = updated.model_copy(
            update={"current_value": await metal_value(updated, price_per_gram)}
        )

    async with transactional(store.db):
        assets = await store.load_assets(for_update=True)
        assets[_find(assets, asset_id)] = updated
        await _save(store, assets)

    logger.info(f"Updated asset {asset_id}")
    return updated


async def delete_asset(store: PortfolioStore, asset_id: str) -> None:
    """
    Remove an asset.

    Raises:
        NotFoundError: If no asset has this id
    """
    async with transactional(store.db):
        assets = await store.load_assets(for_update=True)
        assets.pop(_find(assets, asset_id))
        await _save(store, assets)

    logger.info(f"Deleted asset {asset_id}")


async def revalue_metals(
    store: PortfolioStore,
    price_per_gram: PricePerGram = metal_price_service.get_inr_per_gram,
) -> list[Asset]:
    """
    Reprice every gold and silver asset at the live rate.

    Each metal is priced once; when its price is unavailable the assets of
    that metal keep their stored value.

    Returns:
        The full asset list after revaluation
    """
    assets = await store.load_assets()
    rates: dict[str, Decimal] = {}
    for asset_type, symbol in _METAL_SYMBOLS.items():
        if not any(asset.details.type == asset_type for asset in assets):
            continue
        try:
            rates[asset_type] = await price_per_gram(symbol)
        except AppException as e:
            logger.warning(f"Could not price {symbol}, keeping stored values: {e}")

    if not rates:
        return assets

    async with transactional(store.db):
        revalued = _apply_metal_rates(await store.load_assets(for_update=True), rates)
        await _save(store, revalued)

    logger.info(f"Revalued metal assets ({', '.join(sorted(rates))})")
    return revalued
