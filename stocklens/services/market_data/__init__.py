"""
Stock Data Service

CONTRACT:
    Input:  symbol
    Output: StockDetail

RESPONSIBILITIES:
    - Search tickers and fetch quotes/fundamentals from Finnhub
    - Fetch daily price history (Finnhub, Alpha Vantage, Yahoo Finance)
    - Fetch analyst recommendations, Zacks Rank and company news
    - Run the indicator engine over the price history
    - Cache responses in Redis
"""

from stocklens.services.market_data.interface import StockDataServiceInterface
from stocklens.services.market_data.finnhub_client import FinnhubClient, FinnhubError
from stocklens.services.market_data.service import (
    StockDataService,
    get_stock_data_service,
    close_stock_data_service,
)

__all__ = [
    "StockDataServiceInterface",
    "FinnhubClient",
    "FinnhubError",
    "StockDataService",
    "get_stock_data_service",
    "close_stock_data_service",
]
