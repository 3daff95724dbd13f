"""Tests for miscellaneous asset operations and metal valuation."""

from decimal import Decimal

import pytest

from networth.core.exceptions import NotFoundError, UpstreamError, ValidationError
from networth.repositories.portfolio_store import PortfolioStore
from networth.schemas.asset import AssetCreate, AssetUpdate
from networth.services import asset_service

pytestmark = pytest.mark.integration


def gold(weight: str = "10", **overrides) -> AssetCreate:
    data = {"name": "Gold coins", "details": {"type": "GOLD", "weightGrams": weight}}
    data.update(overrides)
    return AssetCreate.model_validate(data)


def fixed_deposit(value: str = "100000") -> AssetCreate:
    return AssetCreate.model_validate(
        {
            "name": "SBI FD",
            "currentValue": value,
            "details": {"type": "FIXED_DEPOSIT", "principalAmount": "90000", "interestRate": "7"},
        }
    )


class TestCreateAsset:
    async def test_non_metal_keeps_supplied_value(self, store: PortfolioStore, price_per_gram):
        asset = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        assert asset.id
        assert asset.current_value == Decimal("100000")
        assert asset.type == "FIXED_DEPOSIT"
        assert await asset_service.list_assets(store) == [asset]

    async def test_metal_valued_at_live_price(self, store: PortfolioStore, price_per_gram):
        # A user supplied value is ignored for metals
        asset = await asset_service.create_asset(
            store, gold("10", currentValue="1"), price_per_gram
        )

        assert asset.current_value == Decimal("70000")

    async def test_metal_price_unavailable(self, store, metal_prices, price_per_gram):
        del metal_prices["XAU"]

        with pytest.raises(UpstreamError):
            await asset_service.create_asset(store, gold(), price_per_gram)

        assert await asset_service.list_assets(store) == []

    async def test_assets_mirrored_into_portfolio(self, store: PortfolioStore, price_per_gram):
        asset = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        portfolio = await store.load_portfolio()
        assert [a.id for a in portfolio.assets] == [asset.id]


class TestUpdateAndDelete:
    async def test_partial_update(self, store: PortfolioStore, price_per_gram):
        asset = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        updated = await asset_service.update_asset(
            store, asset.id, AssetUpdate(current_value=Decimal("105000")), price_per_gram
        )

        assert updated.current_value == Decimal("105000")
        assert updated.name == "SBI FD"
        assert updated.details == asset.details

    async def test_changing_details_changes_type(self, store: PortfolioStore, price_per_gram):
        asset = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        updated = await asset_service.update_asset(
            store,
            asset.id,
            AssetUpdate.model_validate({"details": {"type": "SILVER", "weightGrams": "100"}}),
            price_per_gram,
        )

        assert updated.type == "SILVER"
        assert updated.current_value == Decimal("9000")

    async def test_invalid_merge(self, store: PortfolioStore, price_per_gram):
        asset = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        with pytest.raises(ValidationError):
            await asset_service.update_asset(
                store, asset.id, AssetUpdate.model_validate({"name": None}), price_per_gram
            )

    async def test_delete(self, store: PortfolioStore, price_per_gram):
        asset = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        await asset_service.delete_asset(store, asset.id)

        assert await asset_service.list_assets(store) == []
        with pytest.raises(NotFoundError):
            await asset_service.get_asset(store, asset.id)

    async def test_delete_unknown(self, store: PortfolioStore):
        with pytest.raises(NotFoundError):
            await asset_service.delete_asset(store, "missing")

    async def test_update_keeps_asset_added_while_pricing(self, store, price_per_gram):
        coins = await asset_service.create_asset(store, gold("10"), price_per_gram)
        added = []

        async def price_and_add(symbol):
            if not added:
                added.append(
                    await asset_service.create_asset(store, fixed_deposit(), price_per_gram)
                )
            return await price_per_gram(symbol)

        await asset_service.update_asset(store, coins.id, AssetUpdate(name="Coins"), price_and_add)

        assets = await asset_service.list_assets(store)
        assert [a.id for a in assets] == [coins.id, added[0].id]
        assert assets[0].name == "Coins"
        portfolio = await store.load_portfolio()
        assert [a.id for a in portfolio.assets] == [coins.id, added[0].id]

    async def test_mutations_lock_the_asset_list(self, store, price_per_gram, mocker):
        spy = mocker.spy(store.kv, "get")

        await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        spy.assert_any_call("assets", for_update=True)
        spy.assert_any_call("stock-portfolio", for_update=True)


class TestRevalueMetals:
    async def test_revalues_gold_and_silver(self, store, metal_prices, price_per_gram):
        gold_asset = await asset_service.create_asset(store, gold("10"), price_per_gram)
        fd = await asset_service.create_asset(store, fixed_deposit(), price_per_gram)
        metal_prices["XAU"] = Decimal("7500")

        assets = await asset_service.revalue_metals(store, price_per_gram)

        by_id = {a.id: a for a in assets}
        assert by_id[gold_asset.id].current_value == Decimal("75000")
        assert by_id[fd.id] == fd

    async def test_unavailable_price_keeps_stored_value(self, store, metal_prices, price_per_gram):
        gold_asset = await asset_service.create_asset(store, gold("10"), price_per_gram)
        del metal_prices["XAU"]

        assets = await asset_service.revalue_metals(store, price_per_gram)

        assert assets[0].current_value == gold_asset.current_value

    async def test_keeps_asset_added_while_pricing(self, store, price_per_gram):
        """Revaluation rewrites the list as stored when the prices arrive."""
        await asset_service.create_asset(store, gold("10"), price_per_gram)
        added = []

        async def price_and_add(symbol):
            if not added:
                added.append(
                    await asset_service.create_asset(store, fixed_deposit(), price_per_gram)
                )
            return await price_per_gram(symbol)

        assets = await asset_service.revalue_metals(store, price_and_add)

        assert [a.type for a in assets] == ["GOLD", "FIXED_DEPOSIT"]
        assert [a.id for a in await asset_service.list_assets(store)] == [a.id for a in assets]

    async def test_summary(self, store: PortfolioStore, price_per_gram):
        await asset_service.create_asset(store, fixed_deposit(), price_per_gram)

        summary = await asset_service.get_asset_summary(store)

        assert summary.count == 1
        assert summary.total_value == Decimal("100000")
        assert summary.total_cost == Decimal("90000")
        assert summary.total_gain_loss == Decimal("10000")
