"""
CONTRACT 1: Market Data

Output of the market data providers (Finnhub, Alpha Vantage, Yahoo, Zacks),
normalized to the JSON shape the frontend consumes (camelCase keys).
"""

import math
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    """NaN/Infinity are not valid JSON numbers; render them as null."""
    if value is None or not math.isfinite(value):
        return None
    return value


# Float that serializes non-finite values as null
OptionalJsonFloat = Annotated[
    Optional[float], PlainSerializer(_finite_or_none, return_type=Optional[float])
]


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# PRICE HISTORY
# =============================================================================


class PriceHistoryPoint(CamelModel):
    """One daily bar. `date` is a label only and is never parsed."""

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int = Field(default=0, ge=0)


# =============================================================================
# QUOTE / FUNDAMENTALS
# =============================================================================


class StockQuote(CamelModel):
    """Current quote for a symbol."""

    symbol: str
    name: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    high: float
    low: float
    open: float
    previous_close: float
    timestamp: int = Field(..., description="Unix seconds of the last trade")


class StockMetrics(CamelModel):
    """Basic fundamentals. Missing values are null."""

    symbol: str
    pe_ratio: Optional[float] = None
    market_cap: Optional[float] = None
    beta: Optional[float] = None
    dividend_yield: Optional[float] = None
    eps: Optional[float] = None
    high_52_week: Optional[float] = Field(default=None, alias="high52Week")
    low_52_week: Optional[float] = Field(default=None, alias="low52Week")

    @classmethod
    def empty(cls, symbol: str) -> "StockMetrics":
        return cls(symbol=symbol.upper())


class AnalystRating(CamelModel):
    """Latest analyst recommendation breakdown."""

    symbol: str
    strong_buy: int = Field(..., ge=0)
    buy: int = Field(..., ge=0)
    hold: int = Field(..., ge=0)
    sell: int = Field(..., ge=0)
    strong_sell: int = Field(..., ge=0)
    total_analysts: int = Field(..., gt=0)


class ZacksRating(CamelModel):
    """Zacks rank: 1 (Strong Buy) to 5 (Strong Sell)."""

    symbol: str
    rank: int = Field(..., ge=1, le=5)
    rank_text: str
    updated_at: Optional[str] = None


class StockNews(CamelModel):
    """Single company news item."""

    id: int
    headline: str
    summary: Optional[str] = None
    source: str
    url: str
    image: Optional[str] = None
    datetime: int = Field(..., description="Unix seconds")


class StockSearchResult(CamelModel):
    """Ticker search hit."""

    symbol: str
    name: str
    type: str
