"""
Stock Data Service Interface

Defines the contract for the market data layer.
"""

from abc import abstractmethod
from typing import Optional

from stocklens.services.base import BaseService
from stocklens.schemas.market import PriceHistoryPoint, StockQuote, StockSearchResult
from stocklens.schemas.indicators import StockDetail


class StockDataServiceInterface(BaseService[str, Optional[StockDetail]]):
    """
    Stock Data Service Contract.

    INPUT: symbol (e.g. "AAPL")

    OUTPUT: StockDetail
        - quote, fundamentals, price history, analyst and Zacks ratings, news
        - MACD series and technical indicator snapshot
        - None when the symbol has no quote
    """

    @property
    def name(self) -> str:
        return "StockDataService"

    @abstractmethod
    async def execute(self, input_data: str) -> Optional[StockDetail]:
        """Fetch and aggregate everything for one symbol."""
        pass

    @abstractmethod
    async def search(self, query: str) -> list[StockSearchResult]:
        """Ticker search."""
        pass

    @abstractmethod
    async def get_quote(self, symbol: str) -> Optional[StockQuote]:
        """Get quick quote for a single symbol."""
        pass

    @abstractmethod
    async def get_price_history(self, symbol: str, days: Optional[int] = None) -> list[PriceHistoryPoint]:
        """Daily bars, ascending, from the first source that has data."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check that the primary data source is configured."""
        pass
