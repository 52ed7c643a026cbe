"""
Watchlist API Endpoints

Per-user watchlists, import/export, share links and saved shares.
"""

import logging
from typing import List, Union

from fastapi import APIRouter, Body, HTTPException

from stocklens.schemas.watchlist import (
    AddWatchlistRequest,
    CreateShareRequest,
    ImportResult,
    ImportWatchlistRequest,
    SavedWatchlist,
    SaveSharedRequest,
    SharedWatchlist,
    SymbolList,
    WatchlistExport,
    WatchlistItem,
)
from stocklens.services.base import NotFoundError, ValidationError
from stocklens.services.watchlist import get_watchlist_store

logger = logging.getLogger(__name__)

router = APIRouter()


# ============ Watchlist ============

@router.get("/{user_id}", response_model=List[WatchlistItem])
async def get_watchlist(user_id: str):
    return await get_watchlist_store().get_watchlist(user_id)


@router.post("/{user_id}", response_model=WatchlistItem, status_code=201)
async def add_to_watchlist(user_id: str, request: AddWatchlistRequest):
    try:
        return await get_watchlist_store().add_to_watchlist(user_id, request.symbol)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.delete("/{user_id}/{symbol}")
async def remove_from_watchlist(user_id: str, symbol: str):
    removed = await get_watchlist_store().remove_from_watchlist(user_id, symbol)
    if not removed:
        raise HTTPException(status_code=404, detail=f"{symbol.upper()} is not on the watchlist")
    return {"success": True}


# ============ Import / Export ============

@router.get("/{user_id}/export", response_model=WatchlistExport)
async def export_watchlist(user_id: str):
    return await get_watchlist_store().export_watchlist(user_id)


@router.post("/{user_id}/import", response_model=ImportResult)
async def import_watchlist(
    user_id: str,
    request: Union[ImportWatchlistRequest, SymbolList] = Body(...),
):
    """
    Import symbols.

    The body is either a bare list of symbols or an object with `symbols`
    (and optionally `replace`), such as a previous export document.
    Invalid and duplicate symbols are reported in the result.
    """
    if isinstance(request, ImportWatchlistRequest):
        symbols, replace = request.symbols, request.replace
    else:
        symbols, replace = request, False

    return await get_watchlist_store().import_watchlist(user_id, symbols, replace=replace)


# ============ Share Links ============

@router.post("/{user_id}/share", response_model=SharedWatchlist, status_code=201)
async def create_share(user_id: str, request: CreateShareRequest):
    try:
        share = await get_watchlist_store().create_share(user_id, request.label)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    logger.info(f"User {user_id} shared {share.stock_count} symbols as {share.share_id}")
    return share


@router.get("/{user_id}/shares", response_model=List[SharedWatchlist])
async def list_shares(user_id: str):
    return await get_watchlist_store().list_shares(user_id)


@router.delete("/{user_id}/share/{share_id}")
async def revoke_share(user_id: str, share_id: str):
    revoked = await get_watchlist_store().revoke_share(user_id, share_id)
    if not revoked:
        raise HTTPException(status_code=404, detail=f"Share {share_id} not found")
    return {"success": True}


# ============ Saved Shared Watchlists ============

@router.get("/{user_id}/saved", response_model=List[SavedWatchlist])
async def get_saved(user_id: str):
    return await get_watchlist_store().get_saved(user_id)


@router.post("/{user_id}/saved", response_model=SavedWatchlist, status_code=201)
async def save_shared(user_id: str, request: SaveSharedRequest):
    try:
        return await get_watchlist_store().save_shared(user_id, request.share_id, request.alias)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.delete("/{user_id}/saved/{saved_id}")
async def remove_saved(user_id: str, saved_id: str):
    removed = await get_watchlist_store().remove_saved(user_id, saved_id)
    if not removed:
        raise HTTPException(status_code=404, detail=f"Saved watchlist {saved_id} not found")
    return {"success": True}
