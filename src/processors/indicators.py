"""
Technical indicators computed from a sparkline price series.

Every function is total over its input: a series shorter than the required
window yields a neutral fallback instead of raising.

- ema: last price when len < period
- macd_histogram: 0.0 when len < 26
- momentum_consistency: 0.0 when len < 10
- rsi: 50.0 when len < period + 1
"""
from typing import List, Sequence

import numpy as np

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
MOMENTUM_WINDOW = 10
RSI_PERIOD = 14


def ema(prices: Sequence[float], period: int) -> float:
    """
    Exponential moving average seeded with the simple average of the
    first `period` values. Returns the final EMA value.
    """
    if len(prices) == 0:
        return 0.0
    if len(prices) < period:
        return float(prices[-1])

    multiplier = 2 / (period + 1)
    value = float(np.mean(prices[:period]))

    for price in prices[period:]:
        value = (price - value) * multiplier + value

    return value


def macd_line(prices: Sequence[float]) -> float:
    """EMA12 - EMA26 of the whole series"""
    return ema(prices, MACD_FAST) - ema(prices, MACD_SLOW)


def macd_histogram(prices: Sequence[float]) -> float:
    """
    MACD line minus its 9-period signal line.

    The signal line is the EMA9 of MACD values recomputed over growing
    prefixes prices[:26] .. prices[:n]. Quadratic in the series length,
    which is bounded by the sparkline size.
    """
    if len(prices) < MACD_SLOW:
        return 0.0

    line = macd_line(prices)

    macd_values: List[float] = [
        macd_line(prices[:i]) for i in range(MACD_SLOW, len(prices) + 1)
    ]
    signal_line = ema(macd_values, MACD_SIGNAL)

    return line - signal_line


def momentum_consistency(prices: Sequence[float]) -> float:
    """
    Directional consistency of the last 10 points, 0-100.

    |up_moves - down_moves| / 9 * 100. Flat steps count neither way,
    magnitude is ignored.
    """
    if len(prices) < MOMENTUM_WINDOW:
        return 0.0

    recent = np.asarray(prices[-MOMENTUM_WINDOW:], dtype=float)
    changes = np.diff(recent)
    up_moves = int(np.sum(changes > 0))
    down_moves = int(np.sum(changes < 0))

    return abs(up_moves - down_moves) / (MOMENTUM_WINDOW - 1) * 100


def rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> float:
    """
    Relative strength index over the trailing `period` changes using
    simple averages of gains and losses. Neutral 50 on short input.
    """
    if len(prices) < period + 1:
        return 50.0

    changes = np.diff(np.asarray(prices, dtype=float))[-period:]
    avg_gain = float(np.sum(np.where(changes > 0, changes, 0.0))) / period
    avg_loss = float(np.sum(np.where(changes < 0, -changes, 0.0))) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def ema_trend_is_bullish(prices: Sequence[float]) -> bool:
    """EMA12 above EMA26"""
    return ema(prices, MACD_FAST) > ema(prices, MACD_SLOW)
