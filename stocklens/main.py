"""
StockLens Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stocklens.core.config import settings
from stocklens.api.v1 import router as api_v1_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    if not settings.finnhub_api_key:
        logger.warning("FINNHUB_API_KEY is not set - quotes and search will be empty")

    # Initialize Redis cache
    from stocklens.services.cache import init_redis, close_redis
    redis_client = await init_redis()
    if redis_client:
        logger.info("Redis cache connected")
    else:
        logger.info("Redis unavailable - using in-memory cache")

    yield

    # Shutdown
    logger.info("Shutting down...")
    from stocklens.services.market_data import close_stock_data_service
    await close_stock_data_service()
    await close_redis()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    StockLens Stock Research API

    ## Features
    - **Search**: Ticker lookup for US common stocks
    - **Stock Detail**: Quote, fundamentals, analyst and Zacks ratings, news
    - **Indicator Engine**: MACD, RSI, SMA, Bollinger Bands, ATR, momentum (NumPy)
    - **Watchlists**: Import/export, share links and saved shares
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
cors_origins = [settings.frontend_url]
if settings.allowed_origins:
    cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    from stocklens.services.market_data import get_stock_data_service

    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "finnhub_configured": await get_stock_data_service().health_check(),
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "StockLens Backend API",
        "docs": "/docs",
        "health": "/health",
    }
