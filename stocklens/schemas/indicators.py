"""
CONTRACT 2: Indicator Engine

Input: ordered list of PriceHistoryPoint (ascending by date)
Output: MACD series + TechnicalIndicators snapshot

Unavailable values (insufficient history) are None and render as null.
"""

from typing import Optional

from pydantic import ConfigDict, Field

from stocklens.schemas.market import (
    CamelModel,
    OptionalJsonFloat,
    AnalystRating,
    PriceHistoryPoint,
    StockMetrics,
    StockNews,
    StockQuote,
    ZacksRating,
)


class MACDData(CamelModel):
    """One MACD point, aligned to the bar with the same date."""

    date: str
    # null only when the input closes contained NaN/Infinity
    macd: OptionalJsonFloat
    signal: OptionalJsonFloat
    histogram: OptionalJsonFloat


class TechnicalIndicators(CamelModel):
    """
    Point-in-time indicator snapshot as of the last bar.

    Each field is independently None when the history is too short for it.
    """

    rsi: OptionalJsonFloat = Field(default=None, description="RSI(14), 0-100")
    sma20: OptionalJsonFloat = None
    sma50: OptionalJsonFloat = None
    sma200: OptionalJsonFloat = None
    bollinger_upper: OptionalJsonFloat = None
    bollinger_middle: OptionalJsonFloat = None
    bollinger_lower: OptionalJsonFloat = None
    atr: OptionalJsonFloat = Field(default=None, description="ATR(14), simple mean of TR")
    momentum: OptionalJsonFloat = Field(default=None, description="close - close[10 bars ago]")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "rsi": 62.4,
                "sma20": 187.21,
                "sma50": 182.9,
                "sma200": None,
                "bollingerUpper": 193.5,
                "bollingerMiddle": 187.21,
                "bollingerLower": 180.92,
                "atr": 3.12,
                "momentum": 4.85,
            }
        }
    )


# =============================================================================
# OUTPUT: StockDetail (Complete Response)
# =============================================================================


class StockDetail(CamelModel):
    """
    Everything the stock detail page shows.
    Returned by: StockDataService.get_stock_detail
    """

    quote: StockQuote
    metrics: StockMetrics
    price_history: list[PriceHistoryPoint]
    macd: list[MACDData]
    technical_indicators: Optional[TechnicalIndicators] = None
    analyst_ratings: Optional[AnalystRating] = None
    zacks_rating: Optional[ZacksRating] = None
    news: list[StockNews] = Field(default_factory=list)
