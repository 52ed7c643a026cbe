"""
Yahoo Finance Data Adapter

Last-resort daily price history when neither Finnhub nor Alpha Vantage
returns data. yfinance is blocking, so calls run in a worker thread.
"""

import asyncio
import logging
from typing import List

import yfinance as yf

from stocklens.schemas.market import PriceHistoryPoint

logger = logging.getLogger(__name__)


def period_for_days(days: int) -> str:
    """Smallest yfinance period covering `days` calendar days."""
    if days <= 30:
        return "1mo"
    elif days <= 90:
        return "3mo"
    elif days <= 180:
        return "6mo"
    elif days <= 365:
        return "1y"
    elif days <= 730:
        return "2y"
    elif days <= 1825:
        return "5y"
    return "max"


def history_to_points(hist) -> List[PriceHistoryPoint]:
    """Convert a yfinance history DataFrame to ascending bars."""
    points = []
    for idx, row in hist.iterrows():
        points.append(
            PriceHistoryPoint(
                date=idx.to_pydatetime().date().isoformat(),
                open=float(row["Open"]),
                high=float(row["High"]),
                low=float(row["Low"]),
                close=float(row["Close"]),
                volume=int(row["Volume"]),
            )
        )
    return points


def _fetch_history_sync(symbol: str, days: int, limit: int) -> List[PriceHistoryPoint]:
    ticker = yf.Ticker(symbol.upper().strip())
    hist = ticker.history(period=period_for_days(days), interval="1d")

    if hist.empty:
        logger.warning(f"No data returned for {symbol} from Yahoo Finance")
        return []

    return history_to_points(hist.tail(limit))


async def fetch_yahoo_history(symbol: str, days: int = 180, limit: int = 180) -> List[PriceHistoryPoint]:
    """
    Fetch daily bars from Yahoo Finance.

    Returns [] on failure.
    """
    try:
        logger.info(f"Fetching {symbol} from Yahoo Finance...")
        return await asyncio.to_thread(_fetch_history_sync, symbol, days, limit)
    except Exception as e:
        logger.error(f"Error fetching {symbol} from Yahoo Finance: {e}")
        return []
