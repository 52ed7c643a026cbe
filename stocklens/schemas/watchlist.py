"""
CONTRACT 3: Watchlist

Per-user watchlists, share links and saved (bookmarked) shared watchlists.
"""

from typing import Annotated, List, Optional

from pydantic import Field

from stocklens.schemas.market import CamelModel


# =============================================================================
# ENTITIES
# =============================================================================


class WatchlistItem(CamelModel):
    """A symbol on a user's watchlist."""

    id: str
    user_id: str
    symbol: str
    added_at: int = Field(..., description="Epoch milliseconds")


class SharedWatchlist(CamelModel):
    """Read-only snapshot of a watchlist published under a share token."""

    share_id: str
    user_id: str
    label: Optional[str] = None
    created_at: int
    symbols: list[str]
    stock_count: int


class SavedWatchlist(CamelModel):
    """A shared watchlist bookmarked by another user."""

    id: str
    user_id: str
    share_id: str
    alias: Optional[str] = None
    saved_at: int
    label: Optional[str] = None
    symbols: list[str] = Field(default_factory=list)
    stock_count: int = 0


class WatchlistExport(CamelModel):
    """Portable watchlist document (import/export)."""

    version: int = 1
    user_id: str
    exported_at: int
    symbols: list[str]


class ImportResult(CamelModel):
    """Outcome of a watchlist import."""

    added: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list, description="Already on the watchlist")
    invalid: list[str] = Field(default_factory=list)
    total: int = 0


# =============================================================================
# REQUESTS
# =============================================================================


class AddWatchlistRequest(CamelModel):
    symbol: str = Field(..., min_length=1, max_length=16)


# Import body when sent as a bare JSON array
SymbolList = Annotated[List[str], Field(max_length=500)]


class ImportWatchlistRequest(CamelModel):
    """Import body as an object. A previous export document also fits."""

    symbols: SymbolList
    replace: bool = False


class CreateShareRequest(CamelModel):
    label: Optional[str] = Field(default=None, max_length=100)


class SaveSharedRequest(CamelModel):
    share_id: str = Field(..., min_length=1)
    alias: Optional[str] = Field(default=None, max_length=100)
