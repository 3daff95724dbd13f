"""Repository layer for database operations.

All state is kept in a single key/value table. The raw repository reads and
writes strings; the portfolio store layers typed, per-entity access on top.

Repositories:
    - KeyValueRepository: Raw get/set of stored strings, with locking reads
    - PortfolioStore: Typed load/save of portfolio, liabilities, assets and
      balances

Usage:
    >>> from networth.repositories import PortfolioStore
    >>>
    >>> # In a route or service
    >>> store = PortfolioStore(db)
    >>> liabilities = await store.load_liabilities()
"""

from networth.repositories.portfolio_store import PortfolioStore
from networth.repositories.storage import KeyValueRepository

__all__ = [
    "KeyValueRepository",
    "PortfolioStore",
]
