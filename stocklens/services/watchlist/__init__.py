"""
Watchlist Service

In-memory watchlists with import/export, share links and saved shares.
"""

from stocklens.services.watchlist.store import (
    WatchlistStore,
    get_watchlist_store,
    reset_watchlist_store,
)

__all__ = [
    "WatchlistStore",
    "get_watchlist_store",
    "reset_watchlist_store",
]
