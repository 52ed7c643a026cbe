"""
Alpha Vantage Data Adapter

Daily candle fallback for when Finnhub's candle endpoint is unavailable
(it is not part of Finnhub's free plan).
"""

import logging
from typing import Optional, Any, Dict, List

import aiohttp

from stocklens.core.config import settings
from stocklens.schemas.market import PriceHistoryPoint

logger = logging.getLogger(__name__)


def parse_daily_series(payload: Dict[str, Any], limit: int = 180) -> List[PriceHistoryPoint]:
    """
    Convert a TIME_SERIES_DAILY payload to ascending bars.

    Keeps only the most recent `limit` days. Error/throttle payloads
    ("Error Message" / "Note") yield [].
    """
    if payload.get("Error Message") or payload.get("Note"):
        logger.error(f"Alpha Vantage error: {payload.get('Error Message') or payload.get('Note')}")
        return []

    time_series = payload.get("Time Series (Daily)")
    if not time_series:
        return []

    points = []
    for date in sorted(time_series)[-limit:]:
        day = time_series[date]
        points.append(
            PriceHistoryPoint(
                date=date,
                open=float(day["1. open"]),
                high=float(day["2. high"]),
                low=float(day["3. low"]),
                close=float(day["4. close"]),
                volume=int(day["5. volume"]),
            )
        )
    return points


class AlphaVantageClient:
    """Async client for the Alpha Vantage daily time series."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self._api_key = api_key if api_key is not None else settings.alpha_vantage_api_key
        self._base_url = base_url or settings.alpha_vantage_base_url
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=settings.http_timeout_seconds),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def get_daily_history(
        self, symbol: str, limit: Optional[int] = None
    ) -> List[PriceHistoryPoint]:
        """Most recent daily bars, ascending. [] on any failure."""
        if not self.is_configured:
            logger.info("Alpha Vantage API key not configured")
            return []

        limit = limit or settings.price_history_max_points
        params = {
            "function": "TIME_SERIES_DAILY",
            "symbol": symbol,
            "outputsize": "full",
            "apikey": self._api_key,
        }

        try:
            session = await self._ensure_session()
            async with session.get(self._base_url, params=params) as response:
                if response.status != 200:
                    logger.error(f"Alpha Vantage API error: {response.status}")
                    return []
                payload = await response.json(content_type=None)
        except Exception as e:
            logger.error(f"Error fetching Alpha Vantage price history for {symbol}: {e}")
            return []

        return parse_daily_series(payload or {}, limit)
