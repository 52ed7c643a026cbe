"""
Shared test fixtures.

Settings are read at import time, so the environment is pinned here
before any stocklens module is imported: no Redis, no Yahoo fallback.
"""

import os
from datetime import date, timedelta

os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("ENABLE_YAHOO_FALLBACK", "false")
os.environ.setdefault("FINNHUB_API_KEY", "test-key")

import pytest

from stocklens.schemas.market import PriceHistoryPoint
from stocklens.services.watchlist import reset_watchlist_store


def make_bars(closes, highs=None, lows=None, start=date(2024, 1, 1)):
    """Daily bars from closes. High/low default to the close."""
    highs = highs if highs is not None else closes
    lows = lows if lows is not None else closes
    return [
        PriceHistoryPoint(
            date=(start + timedelta(days=i)).isoformat(),
            open=close,
            high=high,
            low=low,
            close=close,
            volume=1_000,
        )
        for i, (close, high, low) in enumerate(zip(closes, highs, lows))
    ]


@pytest.fixture
def bars():
    return make_bars


@pytest.fixture(autouse=True)
def watchlist_store():
    """Fresh in-memory store per test."""
    return reset_watchlist_store()
