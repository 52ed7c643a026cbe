"""
Stock Data Service Implementation

Aggregates quote, fundamentals, history, ratings and news for a symbol.
Price history sources, in order:
    Primary: Finnhub daily candles
    Secondary: Alpha Vantage TIME_SERIES_DAILY
    Fallback: Yahoo Finance (if enabled)
"""

import asyncio
import logging
from typing import Optional

from stocklens.core.config import settings
from stocklens.schemas.market import PriceHistoryPoint, StockQuote, StockSearchResult
from stocklens.schemas.indicators import StockDetail
from stocklens.services.cache.redis_client import ResponseCache, get_response_cache
from stocklens.services.indicators import compute_macd, compute_indicator_snapshot
from stocklens.services.market_data.interface import StockDataServiceInterface
from stocklens.services.market_data.finnhub_client import FinnhubClient
from stocklens.services.market_data.alpha_vantage_adapter import AlphaVantageClient
from stocklens.services.market_data.yahoo_adapter import fetch_yahoo_history
from stocklens.services.market_data.zacks_adapter import ZacksClient

logger = logging.getLogger(__name__)


def normalize_symbol(symbol: str) -> str:
    return symbol.upper().strip()


class StockDataService(StockDataServiceInterface):
    """
    Stock Data Service.

    Provider errors are logged and degrade to empty/None results, except
    FinnhubError raised while fetching the quote for a detail page, which
    the API maps to 401/403/429.
    """

    def __init__(
        self,
        finnhub: Optional[FinnhubClient] = None,
        alpha_vantage: Optional[AlphaVantageClient] = None,
        zacks: Optional[ZacksClient] = None,
        cache: Optional[ResponseCache] = None,
        enable_yahoo_fallback: Optional[bool] = None,
    ):
        self.finnhub = finnhub or FinnhubClient()
        self.alpha_vantage = alpha_vantage or AlphaVantageClient()
        self.zacks = zacks or ZacksClient()
        self.cache = cache or get_response_cache()
        self._enable_yahoo_fallback = (
            settings.enable_yahoo_fallback if enable_yahoo_fallback is None else enable_yahoo_fallback
        )

    @property
    def name(self) -> str:
        return "StockDataService"

    async def execute(self, input_data: str) -> Optional[StockDetail]:
        return await self.get_stock_detail(input_data)

    async def search(self, query: str) -> list[StockSearchResult]:
        """Ticker search, cached per query."""
        query = query.strip()
        if not query:
            return []

        key = f"search:{query.lower()}"
        cached = await self.cache.get_json(key)
        if cached is not None:
            return [StockSearchResult.model_validate(item) for item in cached]

        results = await self.finnhub.search(query)
        if results:
            await self.cache.set_json(
                key,
                [r.model_dump(mode="json", by_alias=True) for r in results],
                settings.search_cache_ttl,
            )
        return results

    async def get_quote(self, symbol: str) -> Optional[StockQuote]:
        """Get quick quote for a single symbol."""
        symbol = normalize_symbol(symbol)
        key = f"quote:{symbol}"

        cached = await self.cache.get_json(key)
        if cached is not None:
            return StockQuote.model_validate(cached)

        quote = await self.finnhub.get_quote(symbol)
        if quote:
            await self.cache.set_json(
                key, quote.model_dump(mode="json", by_alias=True), settings.quote_cache_ttl
            )
        return quote

    async def get_price_history(
        self, symbol: str, days: Optional[int] = None
    ) -> list[PriceHistoryPoint]:
        """Daily bars, ascending, from the first source that has data."""
        symbol = normalize_symbol(symbol)
        days = days or settings.price_history_days

        try:
            points = await self.finnhub.get_candles(symbol, days)
            if points:
                return points
        except Exception as e:
            logger.info(f"Finnhub candle endpoint failed for {symbol} ({e}), trying Alpha Vantage...")

        points = await self.alpha_vantage.get_daily_history(symbol)
        if points:
            return points

        if self._enable_yahoo_fallback:
            return await fetch_yahoo_history(
                symbol, days=days, limit=settings.price_history_max_points
            )
        return []

    async def get_stock_detail(self, symbol: str) -> Optional[StockDetail]:
        """
        Everything the stock detail page needs, fetched concurrently.

        Returns None if the symbol has no quote.
        """
        symbol = normalize_symbol(symbol)
        key = f"detail:{symbol}"

        cached = await self.cache.get_json(key)
        if cached is not None:
            return StockDetail.model_validate(cached)

        quote, metrics, price_history, analyst_ratings, zacks_rating, news = await asyncio.gather(
            self.finnhub.get_quote(symbol),
            self.finnhub.get_metrics(symbol),
            self.get_price_history(symbol),
            self.finnhub.get_analyst_ratings(symbol),
            self.zacks.get_rating(symbol),
            self.finnhub.get_company_news(
                symbol, days=settings.news_lookback_days, limit=settings.news_limit
            ),
        )

        if not quote:
            return None

        detail = StockDetail(
            quote=quote,
            metrics=metrics,
            price_history=price_history,
            macd=compute_macd(price_history),
            technical_indicators=compute_indicator_snapshot(price_history),
            analyst_ratings=analyst_ratings,
            zacks_rating=zacks_rating,
            news=news,
        )

        logger.info(
            f"Built detail for {symbol}: {len(price_history)} bars, "
            f"{len(detail.macd)} MACD points"
        )

        await self.cache.set_json(
            key, detail.model_dump(mode="json", by_alias=True), settings.detail_cache_ttl
        )
        return detail

    async def health_check(self) -> bool:
        """Finnhub is the only mandatory source."""
        return bool(settings.finnhub_api_key)

    async def close(self) -> None:
        """Close all provider HTTP sessions."""
        await self.finnhub.close()
        await self.alpha_vantage.close()
        await self.zacks.close()


# Singleton instance
_service_instance: Optional[StockDataService] = None


def get_stock_data_service() -> StockDataService:
    """Get or create stock data service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = StockDataService()
    return _service_instance


async def close_stock_data_service() -> None:
    """Close provider sessions on shutdown."""
    global _service_instance
    if _service_instance is not None:
        await _service_instance.close()
        _service_instance = None
