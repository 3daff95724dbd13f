"""Portfolio price refresh.

One quote request per distinct symbol, all in flight at once. A symbol whose
request fails keeps the price derived from the ledger.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from networth.core.exceptions import AppException
from networth.schemas.portfolio import Holding, PortfolioMetrics
from networth.schemas.quote import Quote
from networth.schemas.transaction import Transaction
from networth.services.portfolio_calculations import (
    compute_metrics,
    derive_holdings,
    percent_of,
)
from networth.services.quote_service import QuoteProvider

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Holdings and metrics after a refresh, plus which symbols got a quote."""

    holdings: list[Holding]
    metrics: PortfolioMetrics
    refreshed_symbols: list[str] = field(default_factory=list)
    failed_symbols: list[str] = field(default_factory=list)
    quotes: dict[str, Quote] = field(default_factory=dict)

    def revalue(
        self, transactions: Sequence[Transaction]
    ) -> tuple[list[Holding], PortfolioMetrics]:
        """Apply the fetched quotes to holdings derived from ``transactions``."""
        holdings = apply_quotes(derive_holdings(transactions), self.quotes)
        return holdings, compute_metrics(holdings)


def distinct_symbols(transactions: Sequence[Transaction]) -> dict[str, str]:
    """Map each ledger symbol to the exchange of its first transaction, in first-seen order."""
    symbols: dict[str, str] = {}
    for tx in transactions:
        symbols.setdefault(tx.symbol, tx.exchange)
    return symbols


def apply_quote(holding: Holding, quote: Quote) -> Holding:
    """Return a new holding valued at the quoted price."""
    current_value = holding.total_quantity * quote.price
    profit_loss = current_value - holding.total_cost
    return holding.model_copy(
        update={
            "last_traded_price": quote.price,
            "current_value": current_value,
            "profit_loss": profit_loss,
            "profit_loss_percent": percent_of(profit_loss, holding.total_cost),
            "day_change": quote.change,
            "day_change_percent": quote.change_percent,
        }
    )


def apply_quotes(holdings: Sequence[Holding], quotes: dict[str, Quote]) -> list[Holding]:
    """Revalue every holding that has a quote; the rest pass through unchanged."""
    return [
        apply_quote(holding, quotes[holding.symbol]) if holding.symbol in quotes else holding
        for holding in holdings
    ]


async def _fetch_quote(provider: QuoteProvider, symbol: str, exchange: str) -> Quote | None:
    try:
        return await provider.get_quote(symbol, exchange)
    except AppException as e:
        logger.warning(f"Price refresh failed for {symbol} ({exchange}): {e.detail}")
    except Exception as e:
        logger.warning(
            f"Price refresh failed for {symbol} ({exchange}): {type(e).__name__}: {e}"
        )
    return None


async def refresh_portfolio(
    transactions: Sequence[Transaction], provider: QuoteProvider
) -> RefreshResult:
    """
    Fetch a live quote for every ledger symbol and revalue the holdings.

    Quotes are requested concurrently with ``asyncio.gather``. A failed
    request is logged and that symbol keeps the value derived from the
    ledger. Holdings and metrics are always re-derived from the
    transactions, so a refresh also repairs a stale holdings cache.

    Args:
        transactions: Ledger in storage order
        provider: Quote source

    Returns:
        RefreshResult; the caller stamps the refresh time

    Example:
        ```python
        result = await refresh_portfolio(portfolio.transactions, MarketQuoteProvider())
        logger.info(f"Refreshed {len(result.refreshed_symbols)} symbols")
        ```
    """
    symbols = distinct_symbols(transactions)
    results = await asyncio.gather(
        *(_fetch_quote(provider, symbol, exchange) for symbol, exchange in symbols.items())
    )
    quotes = {
        symbol: quote for symbol, quote in zip(symbols, results, strict=True) if quote is not None
    }

    holdings = apply_quotes(derive_holdings(transactions), quotes)
    failed = [symbol for symbol in symbols if symbol not in quotes]

    logger.info(
        f"Price refresh complete: {len(quotes)} updated, {len(failed)} failed "
        f"out of {len(symbols)} symbols"
    )

    return RefreshResult(
        holdings=holdings,
        metrics=compute_metrics(holdings),
        refreshed_symbols=list(quotes),
        failed_symbols=failed,
        quotes=quotes,
    )
