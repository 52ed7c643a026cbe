"""
Watchlist Store

In-memory storage for watchlists, share links and saved shared watchlists.
Records are keyed by random IDs and live for the lifetime of the process.
"""

import asyncio
import logging
import re
import secrets
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Iterable

from stocklens.schemas.watchlist import (
    WatchlistItem,
    SharedWatchlist,
    SavedWatchlist,
    WatchlistExport,
    ImportResult,
)
from stocklens.services.base import ValidationError, NotFoundError

logger = logging.getLogger(__name__)

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.\-]{1,10}$")
EXPORT_VERSION = 1


def normalize_symbol(symbol: str) -> str:
    return symbol.upper().strip()


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _SavedRecord:
    id: str
    user_id: str
    share_id: str
    alias: Optional[str]
    saved_at: int


@dataclass
class _StoreState:
    watchlist: Dict[str, WatchlistItem] = field(default_factory=dict)
    shares: Dict[str, SharedWatchlist] = field(default_factory=dict)
    saved: Dict[str, _SavedRecord] = field(default_factory=dict)


class WatchlistStore:
    """
    Process-local watchlist storage.

    All mutations run under one asyncio.Lock so concurrent requests for the
    same user cannot create duplicate entries.
    """

    def __init__(self):
        self._state = _StoreState()
        self._lock = asyncio.Lock()

    # ============ Watchlist ============

    async def get_watchlist(self, user_id: str) -> List[WatchlistItem]:
        """Items for a user, oldest first."""
        return [item for item in self._state.watchlist.values() if item.user_id == user_id]

    async def add_to_watchlist(self, user_id: str, symbol: str) -> WatchlistItem:
        """
        Add a symbol. Adding an existing symbol returns the existing item.

        Raises:
            ValidationError: if the symbol is empty or malformed
        """
        normalized = normalize_symbol(symbol)
        if not SYMBOL_PATTERN.match(normalized):
            raise ValidationError("WatchlistStore", f"Invalid symbol: {symbol!r}")

        async with self._lock:
            existing = self._find(user_id, normalized)
            if existing:
                return existing

            item = WatchlistItem(
                id=str(uuid.uuid4()),
                user_id=user_id,
                symbol=normalized,
                added_at=_now_ms(),
            )
            self._state.watchlist[item.id] = item
            return item

    async def remove_from_watchlist(self, user_id: str, symbol: str) -> bool:
        async with self._lock:
            item = self._find(user_id, normalize_symbol(symbol))
            if item is None:
                return False
            del self._state.watchlist[item.id]
            return True

    async def is_in_watchlist(self, user_id: str, symbol: str) -> bool:
        return self._find(user_id, normalize_symbol(symbol)) is not None

    def _find(self, user_id: str, symbol: str) -> Optional[WatchlistItem]:
        for item in self._state.watchlist.values():
            if item.user_id == user_id and item.symbol == symbol:
                return item
        return None

    def _symbols(self, user_id: str) -> List[str]:
        return [item.symbol for item in self._state.watchlist.values() if item.user_id == user_id]

    # ============ Import / Export ============

    async def export_watchlist(self, user_id: str) -> WatchlistExport:
        return WatchlistExport(
            version=EXPORT_VERSION,
            user_id=user_id,
            exported_at=_now_ms(),
            symbols=self._symbols(user_id),
        )

    async def import_watchlist(
        self, user_id: str, symbols: Iterable[str], replace: bool = False
    ) -> ImportResult:
        """
        Bulk-add symbols.

        Invalid symbols are reported, not raised. With replace=True the
        existing watchlist is cleared first.
        """
        result = ImportResult()

        async with self._lock:
            if replace:
                for item_id in [i.id for i in self._state.watchlist.values() if i.user_id == user_id]:
                    del self._state.watchlist[item_id]

            seen = set()
            for raw in symbols:
                result.total += 1
                normalized = normalize_symbol(raw)
                if not SYMBOL_PATTERN.match(normalized):
                    result.invalid.append(raw)
                    continue
                if normalized in seen or self._find(user_id, normalized):
                    result.skipped.append(normalized)
                    continue

                seen.add(normalized)
                item = WatchlistItem(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    symbol=normalized,
                    added_at=_now_ms(),
                )
                self._state.watchlist[item.id] = item
                result.added.append(normalized)

        logger.info(
            f"Imported watchlist for {user_id}: {len(result.added)} added, "
            f"{len(result.skipped)} skipped, {len(result.invalid)} invalid"
        )
        return result

    # ============ Share Links ============

    async def create_share(self, user_id: str, label: Optional[str] = None) -> SharedWatchlist:
        """
        Publish a snapshot of the user's current watchlist.

        Raises:
            ValidationError: if the watchlist is empty
        """
        symbols = self._symbols(user_id)
        if not symbols:
            raise ValidationError("WatchlistStore", "Cannot share an empty watchlist")

        label = label.strip() if label else None
        share = SharedWatchlist(
            share_id=secrets.token_urlsafe(9),
            user_id=user_id,
            label=label or None,
            created_at=_now_ms(),
            symbols=symbols,
            stock_count=len(symbols),
        )
        async with self._lock:
            self._state.shares[share.share_id] = share
        return share

    async def get_share(self, share_id: str) -> Optional[SharedWatchlist]:
        return self._state.shares.get(share_id)

    async def list_shares(self, user_id: str) -> List[SharedWatchlist]:
        return [s for s in self._state.shares.values() if s.user_id == user_id]

    async def revoke_share(self, user_id: str, share_id: str) -> bool:
        """Delete a share link. Only its owner may revoke it."""
        async with self._lock:
            share = self._state.shares.get(share_id)
            if share is None or share.user_id != user_id:
                return False
            del self._state.shares[share_id]
            return True

    # ============ Saved Shared Watchlists ============

    async def save_shared(
        self, user_id: str, share_id: str, alias: Optional[str] = None
    ) -> SavedWatchlist:
        """
        Bookmark someone's shared watchlist. Saving it again updates the alias.

        Raises:
            NotFoundError: if the share does not exist (or was revoked)
        """
        share = self._state.shares.get(share_id)
        if share is None:
            raise NotFoundError("WatchlistStore", f"Shared watchlist {share_id} not found")

        alias = alias.strip() if alias else None

        async with self._lock:
            record = next(
                (r for r in self._state.saved.values()
                 if r.user_id == user_id and r.share_id == share_id),
                None,
            )
            if record is None:
                record = _SavedRecord(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    share_id=share_id,
                    alias=alias or None,
                    saved_at=_now_ms(),
                )
                self._state.saved[record.id] = record
            else:
                record.alias = alias or None

        return self._resolve_saved(record, share)

    async def get_saved(self, user_id: str) -> List[SavedWatchlist]:
        """Saved watchlists with current contents. Revoked shares are skipped."""
        saved = []
        for record in self._state.saved.values():
            if record.user_id != user_id:
                continue
            share = self._state.shares.get(record.share_id)
            if share is None:
                continue
            saved.append(self._resolve_saved(record, share))
        return saved

    async def remove_saved(self, user_id: str, saved_id: str) -> bool:
        async with self._lock:
            record = self._state.saved.get(saved_id)
            if record is None or record.user_id != user_id:
                return False
            del self._state.saved[saved_id]
            return True

    @staticmethod
    def _resolve_saved(record: _SavedRecord, share: SharedWatchlist) -> SavedWatchlist:
        return SavedWatchlist(
            id=record.id,
            user_id=record.user_id,
            share_id=record.share_id,
            alias=record.alias,
            saved_at=record.saved_at,
            label=share.label,
            symbols=list(share.symbols),
            stock_count=share.stock_count,
        )


# Singleton instance
_store_instance: Optional[WatchlistStore] = None


def get_watchlist_store() -> WatchlistStore:
    """Get or create the watchlist store."""
    global _store_instance
    if _store_instance is None:
        _store_instance = WatchlistStore()
    return _store_instance


def reset_watchlist_store() -> WatchlistStore:
    """Replace the store with an empty one."""
    global _store_instance
    _store_instance = WatchlistStore()
    return _store_instance
