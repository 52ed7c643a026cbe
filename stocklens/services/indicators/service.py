"""
Indicator Engine Service Implementation

Calculates MACD and the technical indicator snapshot from daily bars.
Pure Python/NumPy calculations; no I/O and no shared state, so every
function here can be called concurrently without coordination.
"""

from typing import Optional, Sequence
import numpy as np

from stocklens.schemas.market import PriceHistoryPoint
from stocklens.schemas.indicators import MACDData, TechnicalIndicators
from stocklens.services.indicators.interface import (
    IndicatorServiceInterface,
    IndicatorResult,
)
from stocklens.services.indicators.calculations import (
    MACD_SLOW_PERIOD,
    MACD_FIRST_SIGNAL_INDEX,
    BOLLINGER_PERIOD,
    macd,
    simple_moving_average,
    rsi,
    bollinger_bands,
    atr,
    momentum,
)

# Minimum bars for any snapshot at all (Bollinger needs 20)
MIN_SNAPSHOT_BARS = BOLLINGER_PERIOD


def _price_history_to_arrays(
    price_history: Sequence[PriceHistoryPoint],
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Convert bars to (highs, lows, closes) float arrays."""
    highs = np.array([p.high for p in price_history], dtype=float)
    lows = np.array([p.low for p in price_history], dtype=float)
    closes = np.array([p.close for p in price_history], dtype=float)
    return highs, lows, closes


def compute_macd(price_history: Sequence[PriceHistoryPoint]) -> list[MACDData]:
    """
    MACD(12, 26, 9) series.

    Returns an empty list for fewer than 26 bars. Otherwise one point per bar
    from index 33 on, where both the MACD line and its 9-period signal exist.
    """
    if len(price_history) < MACD_SLOW_PERIOD:
        return []

    _, _, closes = _price_history_to_arrays(price_history)
    macd_line, signal_line, histogram = macd(closes)

    return [
        MACDData(
            date=price_history[i].date,
            macd=float(macd_line[i]),
            signal=float(signal_line[i]),
            histogram=float(histogram[i]),
        )
        for i in range(MACD_FIRST_SIGNAL_INDEX, len(price_history))
    ]


def compute_indicator_snapshot(
    price_history: Sequence[PriceHistoryPoint],
) -> Optional[TechnicalIndicators]:
    """
    Indicator snapshot as of the last bar.

    None for fewer than 20 bars. Above that each indicator is computed
    independently over the full history and is None on its own when its
    window does not fit (e.g. SMA200 with 150 bars).
    """
    if len(price_history) < MIN_SNAPSHOT_BARS:
        return None

    highs, lows, closes = _price_history_to_arrays(price_history)
    upper, middle, lower = bollinger_bands(closes)

    return TechnicalIndicators(
        rsi=rsi(closes),
        sma20=simple_moving_average(closes, 20),
        sma50=simple_moving_average(closes, 50),
        sma200=simple_moving_average(closes, 200),
        bollinger_upper=upper,
        bollinger_middle=middle,
        bollinger_lower=lower,
        atr=atr(highs, lows, closes),
        momentum=momentum(closes),
    )


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Thin async wrapper over the pure functions above so the engine fits the
    same service contract as the data providers.
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: Sequence[PriceHistoryPoint]) -> IndicatorResult:
        """Calculate MACD series and indicator snapshot."""
        return IndicatorResult(
            macd=compute_macd(input_data),
            technical_indicators=compute_indicator_snapshot(input_data),
        )

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
