"""
StockLens Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from stocklens.schemas.market import (
    PriceHistoryPoint,
    StockQuote,
    StockMetrics,
    AnalystRating,
    ZacksRating,
    StockNews,
    StockSearchResult,
)
from stocklens.schemas.indicators import (
    MACDData,
    TechnicalIndicators,
    StockDetail,
)
from stocklens.schemas.watchlist import (
    WatchlistItem,
    SharedWatchlist,
    SavedWatchlist,
    WatchlistExport,
    ImportResult,
)

__all__ = [
    # Market
    "PriceHistoryPoint",
    "StockQuote",
    "StockMetrics",
    "AnalystRating",
    "ZacksRating",
    "StockNews",
    "StockSearchResult",
    # Indicators
    "MACDData",
    "TechnicalIndicators",
    "StockDetail",
    # Watchlist
    "WatchlistItem",
    "SharedWatchlist",
    "SavedWatchlist",
    "WatchlistExport",
    "ImportResult",
]
