"""
Technical Indicator Calculations

Pure NumPy implementations of the indicators shown on the stock detail page.
All math is deterministic. Insufficient history is reported as NaN slots
(series) or None (point values), never raised. NaN/Infinity in the input
propagate through the arithmetic untouched.
"""

import numpy as np
from typing import Optional


# Fixed indicator periods
MACD_FAST_PERIOD = 12
MACD_SLOW_PERIOD = 26
MACD_SIGNAL_PERIOD = 9
RSI_PERIOD = 14
BOLLINGER_PERIOD = 20
BOLLINGER_STD_DEV = 2.0
ATR_PERIOD = 14
MOMENTUM_PERIOD = 10

# First bar index with both a MACD value and a seeded signal value (33)
MACD_FIRST_SIGNAL_INDEX = (MACD_SLOW_PERIOD - 1) + (MACD_SIGNAL_PERIOD - 1)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Output is aligned with the input: slots before `period - 1` are NaN,
    slot `period - 1` is the SMA of the first `period` values (seed), and
    every later slot applies the 2/(period+1) smoothing step.
    """
    result = np.full(len(data), np.nan)
    if len(data) < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    result[period - 1] = np.mean(data[:period])

    for i in range(period, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


def _is_flat(window: np.ndarray) -> bool:
    """True when every value in the window is identical (NaN never is)."""
    return bool(np.ptp(window) == 0)


def _window_mean(window: np.ndarray) -> float:
    # np.mean of a flat window of non-dyadic values drifts by an ulp
    if _is_flat(window):
        return float(window[0])
    return float(np.mean(window))


def simple_moving_average(data: np.ndarray, period: int) -> Optional[float]:
    """Mean of the last `period` values, or None if there are fewer."""
    if len(data) < period:
        return None
    return _window_mean(data[-period:])


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def macd(
    closes: np.ndarray,
    fast_period: int = MACD_FAST_PERIOD,
    slow_period: int = MACD_SLOW_PERIOD,
    signal_period: int = MACD_SIGNAL_PERIOD,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    The MACD line exists from index `slow_period - 1`. The signal line is
    the EMA of the dense MACD series starting at that offset, written back
    at the same original indices, so signal[i] is the EMA entry at compacted
    position `i - (slow_period - 1)`.

    Returns: (macd_line, signal_line, histogram), all aligned to `closes`.
    """
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    macd_line = fast_ema - slow_ema

    signal_line = np.full(len(closes), np.nan)
    offset = slow_period - 1
    if len(closes) > offset:
        signal_line[offset:] = ema(macd_line[offset:], signal_period)

    histogram = macd_line - signal_line

    return macd_line, signal_line, histogram


def rsi(closes: np.ndarray, period: int = RSI_PERIOD) -> Optional[float]:
    """
    Relative Strength Index over the last `period` day-over-day changes.

    Plain averages of gains and losses (no Wilder smoothing). A window with
    no losses is 100, including a completely flat window.
    """
    if len(closes) < period + 1:
        return None

    deltas = np.diff(closes)[-period:]

    # np.clip keeps NaN, so bad input propagates instead of reading as 0
    avg_gain = np.sum(np.clip(deltas, 0, None)) / period
    avg_loss = np.sum(np.clip(-deltas, 0, None)) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return float(100 - (100 / (1 + rs)))


def momentum(closes: np.ndarray, period: int = MOMENTUM_PERIOD) -> Optional[float]:
    """Price change over `period` bars, in price units."""
    if len(closes) < period + 1:
        return None
    return float(closes[-1] - closes[-1 - period])


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True range for every bar except the first (which has no previous close)."""
    prev_closes = closes[:-1]
    return np.maximum(
        highs[1:] - lows[1:],
        np.maximum(np.abs(highs[1:] - prev_closes), np.abs(lows[1:] - prev_closes)),
    )


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = ATR_PERIOD
) -> Optional[float]:
    """Average True Range: simple mean of the last `period` true ranges."""
    if len(closes) < period + 1:
        return None
    return float(np.mean(true_range(highs, lows, closes)[-period:]))


def bollinger_bands(
    closes: np.ndarray,
    period: int = BOLLINGER_PERIOD,
    std_dev: float = BOLLINGER_STD_DEV,
) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """
    Bollinger Bands over the last `period` closes.

    Uses the population standard deviation (divide by `period`).

    Returns: (upper, middle, lower)
    """
    if len(closes) < period:
        return None, None, None

    window = closes[-period:]
    middle = _window_mean(window)
    std = 0.0 if _is_flat(window) else np.std(window)

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    return float(upper), float(middle), float(lower)
