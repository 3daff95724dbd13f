"""Balance sheet composition."""

import logging
from collections.abc import Sequence
from decimal import Decimal

from networth.core.constants import LiabilityBuckets
from networth.db.session import transactional
from networth.repositories.portfolio_store import PortfolioStore
from networth.schemas.asset import Asset, AssetSummary
from networth.schemas.balance_sheet import (
    Balances,
    BalanceSheet,
    BalanceSheetAssets,
    BalanceSheetLiabilities,
    BalanceSheetMetrics,
    BalancesUpdate,
)
from networth.schemas.liability import Liability
from networth.schemas.portfolio import Holding
from networth.services.liability_calculations import (
    compute_liability_metrics,
    debt_to_asset_ratio,
)
from networth.services.portfolio_calculations import ZERO, compute_metrics, percent_of

logger = logging.getLogger(__name__)


def asset_cost_basis(asset: Asset) -> Decimal:
    """Amount put into an asset, falling back to its current value."""
    cost = asset.details.cost_basis()
    return cost if cost is not None else asset.current_value


def summarize_assets(assets: Sequence[Asset]) -> AssetSummary:
    """
    Total value, cost basis and gain/loss over miscellaneous assets.

    Args:
        assets: Assets to summarise

    Returns:
        AssetSummary; all zero for an empty list
    """
    total_value = sum((asset.current_value for asset in assets), ZERO)
    total_cost = sum((asset_cost_basis(asset) for asset in assets), ZERO)
    gain_loss = total_value - total_cost

    return AssetSummary(
        total_value=total_value,
        total_cost=total_cost,
        total_gain_loss=gain_loss,
        total_gain_loss_percentage=percent_of(gain_loss, total_cost),
        count=len(assets),
    )


def compose_balance_sheet(
    holdings: Sequence[Holding] = (),
    liabilities: Sequence[Liability] = (),
    cash: Decimal = ZERO,
    other_assets: Decimal = ZERO,
    other_liabilities: Decimal = ZERO,
    misc_assets: Sequence[Asset] = (),
) -> BalanceSheet:
    """
    Combine holdings, liabilities and balances into a balance sheet.

    Every miscellaneous asset counts towards total assets, whether or not it
    is marked active. Liabilities of type OTHER appear in no display bucket
    but still count towards total liabilities.

    Args:
        holdings: Current stock holdings
        liabilities: All liabilities
        cash: Cash balance
        other_assets: Free-form other assets amount
        other_liabilities: Free-form other liabilities amount
        misc_assets: Itemised miscellaneous assets

    Returns:
        BalanceSheet with net worth = total assets - total liabilities
    """
    asset_metrics = compute_metrics(holdings)
    liability_metrics = compute_liability_metrics(liabilities)
    asset_summary = summarize_assets(misc_assets)

    total_assets = asset_metrics.total_value + cash + other_assets + asset_summary.total_value
    total_liabilities = liability_metrics.total_liabilities + other_liabilities

    return BalanceSheet(
        assets=BalanceSheetAssets(
            stocks=list(holdings),
            cash=cash,
            other_assets=other_assets,
            misc_assets=list(misc_assets),
            misc_assets_value=asset_summary.total_value,
            total_assets=total_assets,
        ),
        liabilities=BalanceSheetLiabilities(
            loans=[item for item in liabilities if item.type.value in LiabilityBuckets.LOANS],
            credit_cards=[
                item for item in liabilities if item.type.value in LiabilityBuckets.CREDIT_CARDS
            ],
            payables=[item for item in liabilities if item.type.value in LiabilityBuckets.PAYABLES],
            other_liabilities=other_liabilities,
            total_liabilities=total_liabilities,
        ),
        net_worth=total_assets - total_liabilities,
        metrics=BalanceSheetMetrics(
            asset_metrics=asset_metrics,
            liability_metrics=liability_metrics,
            asset_summary=asset_summary,
            debt_to_asset_ratio=debt_to_asset_ratio(total_liabilities, total_assets),
        ),
    )


async def get_balances(store: PortfolioStore) -> Balances:
    return Balances(
        cash=await store.load_cash(),
        other_assets=await store.load_other_assets(),
        other_liabilities=await store.load_other_liabilities(),
    )


async def update_balances(store: PortfolioStore, update: BalancesUpdate) -> Balances:
    """
    Save the scalar balances that were supplied, keeping the others.

    Args:
        store: Portfolio store bound to the request session
        update: Balances to overwrite

    Returns:
        All three balances after the update
    """
    async with transactional(store.db):
        if update.cash is not None:
            await store.save_cash(update.cash)
        if update.other_assets is not None:
            await store.save_other_assets(update.other_assets)
        if update.other_liabilities is not None:
            await store.save_other_liabilities(update.other_liabilities)

    balances = await get_balances(store)
    logger.info(
        f"Updated balances: cash={balances.cash}, other_assets={balances.other_assets}, "
        f"other_liabilities={balances.other_liabilities}"
    )
    return balances


async def build_balance_sheet(store: PortfolioStore) -> BalanceSheet:
    """Load everything the balance sheet needs from the store and compose it."""
    portfolio = await store.load_portfolio()
    balances = await get_balances(store)

    return compose_balance_sheet(
        holdings=portfolio.holdings,
        liabilities=await store.load_liabilities(),
        cash=balances.cash,
        other_assets=balances.other_assets,
        other_liabilities=balances.other_liabilities,
        misc_assets=await store.load_assets(),
    )
