"""
Stock API Endpoints

Search, quotes, detail aggregation, price history and indicators.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from stocklens.schemas.market import PriceHistoryPoint, StockQuote, StockSearchResult
from stocklens.schemas.indicators import MACDData, StockDetail, TechnicalIndicators
from stocklens.services.indicators import compute_macd, compute_indicator_snapshot
from stocklens.services.market_data import FinnhubError, get_stock_data_service

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_DETAIL = "Rate limit exceeded. Please try again later."


def _provider_error(symbol: str, e: Exception) -> HTTPException:
    """Map a provider failure to an HTTP error."""
    if isinstance(e, FinnhubError):
        if e.status == 429:
            return HTTPException(status_code=429, detail=RATE_LIMIT_DETAIL)
        if e.status in (401, 403):
            return HTTPException(status_code=e.status, detail=e.message)

    logger.error(f"Failed to fetch data for {symbol}: {e}")
    return HTTPException(status_code=500, detail=f"Failed to fetch data for {symbol}")


@router.get("/search", response_model=List[StockSearchResult])
async def search_stocks(
    query: Optional[str] = Query(default=None, max_length=50),
    q: Optional[str] = Query(default=None, max_length=50),
):
    """Ticker search. Accepts `query` or `q`."""
    term = (query or q or "").strip()
    if not term:
        return []

    service = get_stock_data_service()
    return await service.search(term)


@router.get("/{symbol}", response_model=StockDetail)
async def get_stock_detail(symbol: str):
    """
    Everything the detail page needs for one symbol.

    Returns:
        - Quote and fundamentals
        - Daily price history with MACD series
        - Technical indicator snapshot (RSI, SMAs, Bollinger, ATR, momentum)
        - Analyst recommendations, Zacks Rank and recent news
    """
    service = get_stock_data_service()

    try:
        detail = await service.get_stock_detail(symbol)
    except Exception as e:
        raise _provider_error(symbol, e)

    if detail is None:
        raise HTTPException(status_code=404, detail=f"Stock {symbol.upper()} not found")
    return detail


@router.get("/{symbol}/quote", response_model=StockQuote)
async def get_quote(symbol: str):
    """Current quote for a symbol."""
    service = get_stock_data_service()

    try:
        quote = await service.get_quote(symbol)
    except Exception as e:
        raise _provider_error(symbol, e)

    if quote is None:
        raise HTTPException(status_code=404, detail=f"Quote not found for {symbol.upper()}")
    return quote


@router.get("/{symbol}/history", response_model=List[PriceHistoryPoint])
async def get_price_history(
    symbol: str,
    days: Optional[int] = Query(default=None, ge=1, le=3650),
):
    """Daily OHLCV bars, oldest first."""
    service = get_stock_data_service()
    return await service.get_price_history(symbol, days)


@router.get("/{symbol}/macd", response_model=List[MACDData])
async def get_macd(symbol: str):
    """MACD(12, 26, 9) series over the default history window."""
    service = get_stock_data_service()
    history = await service.get_price_history(symbol)
    return compute_macd(history)


@router.get("/{symbol}/indicators", response_model=Optional[TechnicalIndicators])
async def get_indicators(symbol: str):
    """Indicator snapshot, or null when there are fewer than 20 bars."""
    service = get_stock_data_service()
    history = await service.get_price_history(symbol)
    return compute_indicator_snapshot(history)
