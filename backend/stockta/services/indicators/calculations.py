"""
Rolling-Window Primitives

Pure NumPy implementations of the formula-language building blocks
(REF, MA, EMA, SMA, LLV, HHV, CROSS, ABS, IF).
NO I/O - All math is deterministic.

Every function takes a full history array of length n and returns an
array of length n. Positions without enough history hold a neutral value
instead of NaN, so composite rules can index any position safely:
- REF pads with 0
- MA, LLV, HHV use the partial window available so far
- ratios with a zero denominator take the caller's documented default
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view


def _as_array(data) -> np.ndarray:
    return np.asarray(data, dtype=float)


# =============================================================================
# LAG / SELECT
# =============================================================================


def ref(data: np.ndarray, k: int) -> np.ndarray:
    """REF: value k bars ago, 0 where there is no history."""
    data = _as_array(data)
    result = np.zeros(len(data))
    if k <= 0:
        return data.copy()
    if k < len(data):
        result[k:] = data[:-k]
    return result


def ref_bool(flags: np.ndarray, k: int) -> np.ndarray:
    """REF for boolean series, False where there is no history."""
    flags = np.asarray(flags, dtype=bool)
    result = np.zeros(len(flags), dtype=bool)
    if k <= 0:
        return flags.copy()
    if k < len(flags):
        result[k:] = flags[:-k]
    return result


def if_else(condition: np.ndarray, true_value, false_value) -> np.ndarray:
    """IF: elementwise select between two values or series."""
    condition = np.asarray(condition, dtype=bool)
    return np.where(condition, true_value, false_value).astype(float)


def abs_series(data: np.ndarray) -> np.ndarray:
    """ABS: elementwise absolute value."""
    return np.abs(_as_array(data))


def safe_ratio(numerator, denominator, default: float) -> np.ndarray:
    """Elementwise numerator / denominator, ``default`` where denominator == 0."""
    numerator = _as_array(numerator)
    denominator = np.broadcast_to(_as_array(denominator), numerator.shape)
    result = np.full(numerator.shape, float(default))
    np.divide(numerator, denominator, out=result, where=denominator != 0)
    return result


def scaled_ratio(numerator, denominator, scale: float, default: float) -> np.ndarray:
    """(numerator / denominator) * scale, ``default`` where denominator == 0."""
    denominator = np.broadcast_to(_as_array(denominator), np.shape(numerator))
    return np.where(denominator != 0, safe_ratio(numerator, denominator, 0.0) * scale, default)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def ma(data: np.ndarray, period: int) -> np.ndarray:
    """
    MA: simple mean of the trailing min(period, i+1) values.

    Before the first full window the mean covers only the available
    prefix; it is never zero-padded.
    """
    data = _as_array(data)
    result = np.zeros(len(data))
    values = data.tolist()
    for i in range(len(values)):
        start = max(0, i - period + 1)
        result[i] = sum(values[start : i + 1]) / (i + 1 - start)
    return result


def ma_full_window(data: np.ndarray, period: int) -> np.ndarray:
    """
    Sliding-window mean that stays 0 until the first full window.

    Used for the persisted MA5/MA10/MA20/MA60 row fields.
    """
    data = _as_array(data)
    result = np.zeros(len(data))
    if period <= 0 or len(data) < period:
        return result

    window_sum = sum(data[:period].tolist())
    result[period - 1] = window_sum / period
    for i in range(period, len(data)):
        window_sum = window_sum - data[i - period] + data[i]
        result[i] = window_sum / period
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    EMA: exponential smoothing with alpha = 2 / (period + 1).

    Seeded with the first value, so result[0] == data[0].
    """
    data = _as_array(data)
    result = np.zeros(len(data))
    if len(data) == 0:
        return result

    alpha = 2.0 / (period + 1.0)
    result[0] = data[0]
    for i in range(1, len(data)):
        result[i] = alpha * data[i] + (1 - alpha) * result[i - 1]
    return result


def sma(data: np.ndarray, period: int, weight: int) -> np.ndarray:
    """
    SMA(X, N, M): smoothed moving average with weight M over period N.

    result[0] = X[0]; for i < N the plain running mean of the prefix;
    afterwards (M * X[i] + (N - M) * result[i-1]) / N.
    Period and weight are independent and must not be swapped.
    """
    data = _as_array(data)
    result = np.zeros(len(data))
    if len(data) == 0:
        return result

    result[0] = data[0]
    running = data[0]
    for i in range(1, len(data)):
        if i < period:
            running += data[i]
            result[i] = running / (i + 1)
        else:
            result[i] = (weight * data[i] + (period - weight) * result[i - 1]) / period
    return result


# =============================================================================
# ROLLING EXTREMES
# =============================================================================


def _rolling_extreme(data: np.ndarray, period: int, reducer, accumulate) -> np.ndarray:
    data = _as_array(data)
    n = len(data)
    if n == 0:
        return np.zeros(0)
    period = max(1, period)

    result = np.empty(n)
    head = min(period - 1, n)
    result[:head] = accumulate(data[:head])
    if n >= period:
        result[period - 1 :] = reducer(sliding_window_view(data, period), axis=1)
    return result


def llv(data: np.ndarray, period: int) -> np.ndarray:
    """LLV: lowest value of the trailing min(period, i+1) values."""
    return _rolling_extreme(data, period, np.min, np.minimum.accumulate)


def hhv(data: np.ndarray, period: int) -> np.ndarray:
    """HHV: highest value of the trailing min(period, i+1) values."""
    return _rolling_extreme(data, period, np.max, np.maximum.accumulate)


# =============================================================================
# CROSSOVER / FILTERS
# =============================================================================


def cross(a, b) -> np.ndarray:
    """
    CROSS(A, B): True at i >= 1 when A[i-1] <= B[i-1] and A[i] > B[i].

    Either side may be a scalar. A downward crossing is CROSS(B, A).
    """
    a = _as_array(a)
    b = _as_array(b)
    shape = np.broadcast_shapes(a.shape, b.shape)
    a = np.broadcast_to(a, shape)
    b = np.broadcast_to(b, shape)

    result = np.zeros(shape, dtype=bool)
    if result.size > 1:
        result[1:] = (a[:-1] <= b[:-1]) & (a[1:] > b[1:])
    return result


def every(condition: np.ndarray, period: int) -> np.ndarray:
    """True at i when condition held on each of the last ``period`` bars."""
    condition = np.asarray(condition, dtype=bool)
    result = np.zeros(len(condition), dtype=bool)
    if period <= 0 or len(condition) < period:
        return result
    result[period - 1 :] = sliding_window_view(condition, period).all(axis=1)
    return result


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True range against the previous close; the first bar uses high - low."""
    highs = _as_array(highs)
    lows = _as_array(lows)
    closes = _as_array(closes)
    prev_close = np.concatenate([closes[:1], closes[:-1]])
    return np.maximum(
        highs - lows,
        np.maximum(np.abs(highs - prev_close), np.abs(lows - prev_close)),
    )
