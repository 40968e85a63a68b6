"""
Oscillators

MACD and KDJ are recurrences: the value at bar i needs the state produced
at bar i-1. They are written as folds that thread an immutable state
object through the bars, so a recompute can start from any persisted
state instead of the series origin.

The RSI family, Williams %R and the true-range average are plain
transforms over the full history.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from stockta.core.config import Settings, get_settings
from stockta.services.indicators.calculations import (
    abs_series,
    hhv,
    llv,
    ref,
    safe_ratio,
    scaled_ratio,
    sma,
    true_range,
)

# Blend of the 3/5/8-bar relative strength and stochastic lines
STRENGTH_PERIODS = (3, 5, 8)
STRENGTH_WEIGHTS = (0.5, 0.31, 0.19)

KDJ_INITIAL = 50.0
NEUTRAL_OSCILLATOR = 50.0


@dataclass(frozen=True)
class OscillatorParams:
    """Periods of the MACD and KDJ recurrences."""

    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    kdj_n: int = 9
    kdj_m1: int = 3
    kdj_m2: int = 3

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "OscillatorParams":
        config = config or get_settings()
        return cls(
            macd_fast=config.macd_fast,
            macd_slow=config.macd_slow,
            macd_signal=config.macd_signal,
            kdj_n=config.kdj_n,
            kdj_m1=config.kdj_m1,
            kdj_m2=config.kdj_m2,
        )


# =============================================================================
# MACD
# =============================================================================


@dataclass(frozen=True)
class MACDState:
    """
    MACD values of one bar.

    ema_fast, ema_slow and dea carry the recurrence; dif and macd are
    outputs kept alongside for crossover detection.
    """

    ema_fast: float
    ema_slow: float
    dif: float = 0.0
    dea: float = 0.0
    macd: float = 0.0


def macd_step(
    previous: Optional[MACDState],
    close: float,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDState:
    """Advance MACD by one bar. Without a previous state the bar seeds it."""
    if previous is None:
        return MACDState(ema_fast=close, ema_slow=close)

    ema_fast = close * 2 / (fast + 1) + previous.ema_fast * (fast - 1) / (fast + 1)
    ema_slow = close * 2 / (slow + 1) + previous.ema_slow * (slow - 1) / (slow + 1)
    dif = ema_fast - ema_slow
    dea = dif * 2 / (signal + 1) + previous.dea * (signal - 1) / (signal + 1)
    return MACDState(
        ema_fast=ema_fast,
        ema_slow=ema_slow,
        dif=dif,
        dea=dea,
        macd=2 * (dif - dea),
    )


def macd_series(
    closes: Sequence[float],
    seed: Optional[MACDState] = None,
    params: OscillatorParams = OscillatorParams(),
) -> list[MACDState]:
    """
    Fold MACD over closes.

    Args:
        closes: closes of the bars to compute
        seed: state of the bar right before closes[0], None to start fresh
    """
    states = []
    state = seed
    for close in closes:
        state = macd_step(state, float(close), params.macd_fast, params.macd_slow, params.macd_signal)
        states.append(state)
    return states


# =============================================================================
# KDJ
# =============================================================================


@dataclass(frozen=True)
class KDJState:
    """K, D carry the recurrence; J = 3K - 2D."""

    k: float = KDJ_INITIAL
    d: float = KDJ_INITIAL
    j: float = KDJ_INITIAL


def kdj_step(
    previous: KDJState,
    close: float,
    window_high: float,
    window_low: float,
    m1: int = 3,
    m2: int = 3,
) -> KDJState:
    """Advance KDJ by one bar given the trailing-window high and low."""
    rsv = 100.0
    if window_high > window_low:
        rsv = (close - window_low) / (window_high - window_low) * 100

    k = previous.k * (m1 - 1) / m1 + rsv / m1
    d = previous.d * (m2 - 1) / m2 + k / m2
    return KDJState(k=k, d=d, j=3 * k - 2 * d)


def kdj_series(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    start: int = 0,
    seed: Optional[KDJState] = None,
    params: OscillatorParams = OscillatorParams(),
) -> list[KDJState]:
    """
    Fold KDJ over bars[start:].

    The arrays hold the full history so the trailing window of the first
    recomputed bar can reach back before ``start``. Without a seed the
    fold must start at the series origin, where K = D = J = 50.
    """
    if start > 0 and seed is None:
        raise ValueError("kdj_series needs a seed state when start > 0")

    window_high = hhv(highs, params.kdj_n)
    window_low = llv(lows, params.kdj_n)

    states = []
    state = seed
    for i in range(start, len(closes)):
        if state is None:
            state = KDJState()
        else:
            state = kdj_step(
                state, float(closes[i]), window_high[i], window_low[i],
                params.kdj_m1, params.kdj_m2,
            )
        states.append(state)
    return states


# =============================================================================
# RSI FAMILY
# =============================================================================


def _price_changes(closes: np.ndarray) -> np.ndarray:
    closes = np.asarray(closes, dtype=float)
    changes = closes - ref(closes, 1)
    if len(changes):
        changes[0] = 0.0
    return changes


def gain_ratio(closes: np.ndarray, period: int, default: float = NEUTRAL_OSCILLATOR) -> np.ndarray:
    """
    SMA(MAX(C-LC,0),N,1) / SMA(ABS(C-LC),N,1) * 100.

    The smoothed gain over smoothed absolute change; ``default`` where
    prices did not move at all.
    """
    changes = _price_changes(closes)
    gains = sma(np.maximum(changes, 0), period, 1)
    moves = sma(abs_series(changes), period, 1)
    return scaled_ratio(gains, moves, 100, default)


def relative_strength(closes: np.ndarray, period: int) -> np.ndarray:
    """Wilder-style RSI from SMA-smoothed gains and losses; 100 when no losses."""
    changes = _price_changes(closes)
    avg_gain = sma(np.maximum(changes, 0), period, 1)
    avg_loss = sma(np.maximum(-changes, 0), period, 1)
    rs = safe_ratio(avg_gain, avg_loss, np.inf)
    return np.where(avg_loss != 0, 100 - 100 / (1 + rs), 100.0)


def weighted_relative_strength(
    closes: np.ndarray,
    periods: tuple[int, ...] = STRENGTH_PERIODS,
    weights: tuple[float, ...] = STRENGTH_WEIGHTS,
) -> np.ndarray:
    """Weighted blend of relative_strength over several periods."""
    blend = np.zeros(len(closes))
    for period, weight in zip(periods, weights):
        blend = blend + weight * relative_strength(closes, period)
    return blend


def smoothed_stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    lookback: int,
    smooth: int,
) -> np.ndarray:
    """SMA of the raw stochastic position (50 on a zero-width band)."""
    top = hhv(highs, lookback)
    bottom = llv(lows, lookback)
    position = safe_ratio(100 * (np.asarray(closes, dtype=float) - bottom), top - bottom, NEUTRAL_OSCILLATOR)
    return sma(position, smooth, 1)


def weighted_stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    lookback: int = 8,
    smooths: tuple[int, ...] = STRENGTH_PERIODS,
    weights: tuple[float, ...] = STRENGTH_WEIGHTS,
) -> np.ndarray:
    """Weighted blend of smoothed stochastics (the short-term wave line)."""
    blend = np.zeros(len(closes))
    for smooth, weight in zip(smooths, weights):
        blend = blend + weight * smoothed_stochastic(highs, lows, closes, lookback, smooth)
    return blend


def williams_r(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 10
) -> np.ndarray:
    """Williams %R on a 0-100 scale (100 at the low); 50 on a zero-width band."""
    top = hhv(highs, period)
    bottom = llv(lows, period)
    return safe_ratio(100 * (top - np.asarray(closes, dtype=float)), top - bottom, NEUTRAL_OSCILLATOR)


def true_range_average(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """
    Simplified ADX: mean true range over the last ``period`` bars.

    0 for the first ``period`` bars, where the window would reach the
    first bar's missing previous close.
    """
    tr = true_range(highs, lows, closes)
    result = np.zeros(len(tr))
    for i in range(period, len(tr)):
        result[i] = sum(tr[i - period + 1 : i + 1].tolist()) / period
    return result
