"""
Public share link endpoint.
"""

from fastapi import APIRouter, HTTPException

from stocklens.schemas.watchlist import SharedWatchlist
from stocklens.services.watchlist import get_watchlist_store

router = APIRouter()


@router.get("/{share_id}", response_model=SharedWatchlist)
async def get_share(share_id: str):
    """Resolve a share link. Revoked links return 404."""
    share = await get_watchlist_store().get_share(share_id)
    if share is None:
        raise HTTPException(status_code=404, detail="Shared watchlist not found")
    return share
