"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "StockLens Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Redis
    redis_url: str = "redis://localhost:6379"
    cache_enabled: bool = True
    quote_cache_ttl: int = 60  # seconds
    detail_cache_ttl: int = 300
    search_cache_ttl: int = 3600

    # CORS (Frontend URL)
    frontend_url: str = "http://localhost:5173"
    allowed_origins: list[str] = ["http://localhost:5173"]

    # Finnhub (quotes, fundamentals, candles, analyst ratings, news)
    finnhub_api_key: Optional[str] = None
    finnhub_base_url: str = "https://finnhub.io/api/v1"

    # Alpha Vantage (daily candle fallback)
    alpha_vantage_api_key: Optional[str] = None
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"

    # Zacks quote feed (proprietary rank)
    zacks_base_url: str = "https://quote-feed.zacks.com/index"

    # Yahoo Finance (last-resort price history)
    enable_yahoo_fallback: bool = True

    # Price history
    price_history_days: int = 180
    price_history_max_points: int = 180
    news_lookback_days: int = 7
    news_limit: int = 10

    # HTTP
    http_timeout_seconds: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
