"""
Indicator Engine Service

CONTRACT:
    Input:  ordered list of PriceHistoryPoint
    Output: IndicatorResult (MACD series + TechnicalIndicators snapshot)

RESPONSIBILITIES:
    - MACD (12, 26, 9) series
    - RSI (14), SMA (20/50/200), Bollinger Bands (20, 2)
    - ATR (14) and Momentum (10)

PURE PYTHON - No I/O.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from stocklens.services.indicators.interface import (
    IndicatorServiceInterface,
    IndicatorResult,
)
from stocklens.services.indicators.service import (
    IndicatorService,
    get_indicator_service,
    compute_macd,
    compute_indicator_snapshot,
)

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorResult",
    "IndicatorService",
    "get_indicator_service",
    "compute_macd",
    "compute_indicator_snapshot",
]
