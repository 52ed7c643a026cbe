"""
Finnhub Data Adapter

Quotes, company profile, fundamentals, daily candles, analyst
recommendations and company news from the Finnhub REST API.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Any, Dict, List

import aiohttp

from stocklens.core.config import settings
from stocklens.schemas.market import (
    AnalystRating,
    PriceHistoryPoint,
    StockMetrics,
    StockNews,
    StockQuote,
    StockSearchResult,
)
from stocklens.services.base import ExternalAPIError

logger = logging.getLogger(__name__)


ERROR_MESSAGES = {
    401: "Invalid API key",
    403: "API access restricted - check your Finnhub plan",
    429: "Rate limit exceeded - please try again later",
    404: "Resource not found",
}

MAX_SEARCH_RESULTS = 10
FATAL_STATUSES = (401, 403, 429)


class FinnhubError(ExternalAPIError):
    """Non-2xx response from Finnhub."""

    def __init__(self, status: int, message: str):
        super().__init__("Finnhub", message, status=status)


def _or_none(value: Any) -> Optional[float]:
    """Finnhub reports missing metrics as 0/None; both mean unavailable."""
    return value if value else None


class FinnhubClient:
    """
    Async Finnhub REST client.

    One aiohttp session is shared for the client's lifetime; call close()
    on shutdown.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self._api_key = api_key if api_key is not None else settings.finnhub_api_key
        self._base_url = base_url or settings.finnhub_base_url
        self._session: Optional[aiohttp.ClientSession] = None

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

    async def fetch(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a Finnhub endpoint and return the decoded JSON body.

        Raises:
            FinnhubError: on any non-2xx status
        """
        session = await self._ensure_session()

        query = {"token": self._api_key or ""}
        query.update(params or {})

        async with session.get(f"{self._base_url}{endpoint}", params=query) as response:
            if not 200 <= response.status < 300:
                raise FinnhubError(
                    response.status,
                    ERROR_MESSAGES.get(response.status, f"Finnhub API error: {response.status}"),
                )
            return await response.json(content_type=None)

    async def search(self, query: str) -> List[StockSearchResult]:
        """Search common stocks on US exchanges (symbols without a suffix)."""
        if not query:
            return []

        try:
            data = await self.fetch("/search", {"q": query})
        except Exception as e:
            logger.error(f"Error searching stocks for '{query}': {e}")
            return []

        if not data or not data.get("result"):
            return []

        results = []
        for item in data["result"]:
            symbol = item.get("symbol", "")
            if item.get("type") != "Common Stock" or "." in symbol:
                continue
            results.append(
                StockSearchResult(
                    symbol=symbol,
                    name=item.get("description", symbol),
                    type=item["type"],
                )
            )
            if len(results) >= MAX_SEARCH_RESULTS:
                break

        return results

    async def get_quote(self, symbol: str) -> Optional[StockQuote]:
        """Current quote plus company name. None if Finnhub has no price."""
        try:
            quote_data, profile_data = await asyncio.gather(
                self.fetch("/quote", {"symbol": symbol}),
                self.fetch("/stock/profile2", {"symbol": symbol}),
            )
        except FinnhubError as e:
            # Credential and quota problems are not "unknown symbol"
            if e.status in FATAL_STATUSES:
                raise
            logger.error(f"Error fetching quote for {symbol}: {e}")
            return None
        except Exception as e:
            logger.error(f"Error fetching quote for {symbol}: {e}")
            return None

        if not quote_data or not quote_data.get("c"):
            return None

        return StockQuote(
            symbol=symbol.upper(),
            name=(profile_data or {}).get("name") or symbol,
            price=quote_data["c"],
            change=quote_data.get("d") or 0,
            change_percent=quote_data.get("dp") or 0,
            high=quote_data.get("h", 0),
            low=quote_data.get("l", 0),
            open=quote_data.get("o", 0),
            previous_close=quote_data.get("pc", 0),
            timestamp=quote_data.get("t", 0),
        )

    async def get_metrics(self, symbol: str) -> StockMetrics:
        """Basic fundamentals. All-null metrics on failure."""
        try:
            data = await self.fetch("/stock/metric", {"symbol": symbol, "metric": "all"})
        except Exception as e:
            logger.error(f"Error fetching metrics for {symbol}: {e}")
            return StockMetrics.empty(symbol)

        metrics = (data or {}).get("metric") or {}
        market_cap = metrics.get("marketCapitalization")

        return StockMetrics(
            symbol=symbol.upper(),
            pe_ratio=_or_none(metrics.get("peBasicExclExtraTTM") or metrics.get("peNormalizedAnnual")),
            # Finnhub reports market cap in millions
            market_cap=market_cap * 1e6 if market_cap else None,
            beta=_or_none(metrics.get("beta")),
            dividend_yield=_or_none(metrics.get("dividendYieldIndicatedAnnual")),
            eps=_or_none(
                metrics.get("epsBasicExclExtraItemsTTM") or metrics.get("epsNormalizedAnnual")
            ),
            high_52_week=_or_none(metrics.get("52WeekHigh")),
            low_52_week=_or_none(metrics.get("52WeekLow")),
        )

    async def get_candles(self, symbol: str, days: int = 180) -> List[PriceHistoryPoint]:
        """
        Daily candles for the last `days` calendar days.

        Returns [] when Finnhub answers without data. HTTP errors propagate
        so the caller can fall back to another source.
        """
        to_ts = int(datetime.now(timezone.utc).timestamp())
        from_ts = to_ts - days * 24 * 60 * 60

        data = await self.fetch(
            "/stock/candle",
            {
                "symbol": symbol,
                "resolution": "D",
                "from": str(from_ts),
                "to": str(to_ts),
            },
        )

        if not data or data.get("s") != "ok" or not data.get("c"):
            return []

        points = []
        for i, close in enumerate(data["c"]):
            date = datetime.fromtimestamp(data["t"][i], tz=timezone.utc).date().isoformat()
            points.append(
                PriceHistoryPoint(
                    date=date,
                    open=data["o"][i],
                    high=data["h"][i],
                    low=data["l"][i],
                    close=close,
                    volume=int(data["v"][i]),
                )
            )
        return points

    async def get_analyst_ratings(self, symbol: str) -> Optional[AnalystRating]:
        """Most recent recommendation period, or None if nobody covers it."""
        try:
            data = await self.fetch("/stock/recommendation", {"symbol": symbol})
        except Exception as e:
            logger.error(f"Error fetching analyst ratings for {symbol}: {e}")
            return None

        if not data:
            return None

        latest = data[0]
        counts = {
            key: int(latest.get(key) or 0)
            for key in ("strongBuy", "buy", "hold", "sell", "strongSell")
        }
        total = sum(counts.values())
        if total == 0:
            return None

        return AnalystRating(
            symbol=symbol.upper(),
            strong_buy=counts["strongBuy"],
            buy=counts["buy"],
            hold=counts["hold"],
            sell=counts["sell"],
            strong_sell=counts["strongSell"],
            total_analysts=total,
        )

    async def get_company_news(
        self, symbol: str, days: int = 7, limit: int = 10
    ) -> List[StockNews]:
        """Recent company news, newest first."""
        today = datetime.now(timezone.utc).date()
        try:
            data = await self.fetch(
                "/company-news",
                {
                    "symbol": symbol,
                    "from": (today - timedelta(days=days)).isoformat(),
                    "to": today.isoformat(),
                },
            )
        except Exception as e:
            logger.error(f"Error fetching news for {symbol}: {e}")
            return []

        news = []
        for item in data or []:
            if not item.get("headline") or not item.get("url"):
                continue
            news.append(
                StockNews(
                    id=item.get("id", 0),
                    headline=item["headline"],
                    summary=item.get("summary") or None,
                    source=item.get("source") or "Finnhub",
                    url=item["url"],
                    image=item.get("image") or None,
                    datetime=item.get("datetime", 0),
                )
            )
            if len(news) >= limit:
                break
        return news
