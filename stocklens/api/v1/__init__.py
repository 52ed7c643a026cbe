"""
API v1 Router

All API endpoints for the frontend.
"""

from fastapi import APIRouter

from stocklens.api.v1.endpoints import stocks, watchlist, share

router = APIRouter()

# Include all endpoint routers
router.include_router(stocks.router, prefix="/stocks", tags=["Stocks"])
router.include_router(watchlist.router, prefix="/watchlist", tags=["Watchlist"])
router.include_router(share.router, prefix="/share", tags=["Sharing"])
