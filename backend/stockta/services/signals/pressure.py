"""
Time-Decay Pressure Composite

Eight-stage mirrored chain: the AS stages track pressure off the lows,
the AD stages off the highs. Every stage is multiplied by the time gate
AS1, which is 1 before 2038 and 0 from 2038 on.

The 2038 gate is a date-overflow guard carried over from the charting
formula. It is kept so historical output stays identical.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from stockta.schemas.market import Bar
from stockta.services.indicators.calculations import (
    abs_series,
    ema,
    hhv,
    llv,
    ma,
    ref,
    scaled_ratio,
    sma,
)

MIN_BARS = 58

EPOCH_GUARD_YEAR = 2038
EXTREME_WINDOW = 30
GATE_MA_WINDOW = 58
CLOSE_CONDITION_FACTOR = 1.3
MAGNITUDE_DIVISOR = 618
LOW_PRESSURE_CAP = 100
HIGH_PRESSURE_CAP = 50
RED_BAR_FLOOR = -150
GREEN_BAR_SCALE = 15


@dataclass(frozen=True)
class PressureBar:
    """One bar of a pressure histogram, drawn from ``start`` to ``end``."""

    trade_date: int
    value: float
    start: float
    end: float


@dataclass
class PressureResult:
    """Stage series and the two pressure histograms."""

    trade_dates: np.ndarray
    as1: np.ndarray
    as2: np.ndarray
    ad2: np.ndarray
    as3: np.ndarray
    ad3: np.ndarray
    as4: np.ndarray
    ad4: np.ndarray
    as5: np.ndarray
    ad5: np.ndarray
    as6: np.ndarray
    ad6: np.ndarray
    as7: np.ndarray
    ad7: np.ndarray
    as8: np.ndarray
    ad8: np.ndarray
    a: np.ndarray  # low-side pressure, capped at 100
    a1: np.ndarray  # high-side pressure, capped at 50

    red_bars: list[PressureBar] = field(default_factory=list)
    green_bars: list[PressureBar] = field(default_factory=list)


def time_gate(trade_dates: np.ndarray) -> np.ndarray:
    """AS1: IF(YEAR >= 2038 AND MONTH >= 1, 0, 1)."""
    years = np.asarray(trade_dates, dtype=np.int64) // 10000
    return np.where(years >= EPOCH_GUARD_YEAR, 0.0, 1.0)


def _momentum_ratio(prices: np.ndarray, reference: np.ndarray, gate: np.ndarray) -> np.ndarray:
    """SMA(ABS(P-R),3,1) / SMA(MAX(P-R,0),3,1) * 100 * gate, 0 on a zero denominator."""
    diff = prices - reference
    numerator = sma(abs_series(diff), 3, 1)
    denominator = sma(np.maximum(diff, 0), 3, 1)
    return scaled_ratio(numerator, denominator, 100, 0.0) * gate


def _amplified(closes: np.ndarray, stage: np.ndarray, gate: np.ndarray) -> np.ndarray:
    """EMA(IF(CLOSE*1.3, X*10, X/10), 3) * gate."""
    boosted = np.where(closes * CLOSE_CONDITION_FACTOR > 0, stage * 10, stage / 10)
    return ema(boosted, 3) * gate


def _pressure(
    touched: np.ndarray,
    stage4: np.ndarray,
    stage6: np.ndarray,
    stage7: np.ndarray,
    gate: np.ndarray,
) -> np.ndarray:
    """EMA(IF(touched, (S4 + S6*2)/2, 0), 3) / 618 * S7 * gate."""
    raw = np.where(touched, (stage4 + stage6 * 2) / 2, 0.0)
    return (ema(raw, 3) / MAGNITUDE_DIVISOR) * stage7 * gate


def calculate_pressure(bars: list[Bar]) -> Optional[PressureResult]:
    """
    Run the time-decay pressure composite.

    Returns None below MIN_BARS bars.
    """
    if len(bars) < MIN_BARS:
        return None

    trade_dates = np.array([b.trade_date for b in bars], dtype=np.int64)
    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)

    as1 = time_gate(trade_dates)

    as2 = ref(lows, 1) * as1
    ad2 = ref(highs, 1) * as1

    as3 = _momentum_ratio(lows, as2, as1)
    ad3 = _momentum_ratio(highs, ad2, as1)

    as4 = _amplified(closes, as3, as1)
    ad4 = _amplified(closes, ad3, as1)

    as5 = llv(lows, EXTREME_WINDOW) * as1
    ad5 = hhv(highs, EXTREME_WINDOW) * as1

    as6 = hhv(as4, EXTREME_WINDOW) * as1
    ad6 = llv(ad4, EXTREME_WINDOW) * as1

    # IF(MA(CLOSE,58),1,0): a positive average opens the gate
    as7 = np.where(ma(closes, GATE_MA_WINDOW) > 0, 1.0, 0.0) * as1
    ad7 = as7.copy()

    as8 = _pressure(lows <= as5, as4, as6, as7, as1)
    ad8 = _pressure(highs >= ad5, ad4, ad6, ad7, as1)

    a = np.minimum(as8, LOW_PRESSURE_CAP) * as1
    a1 = np.minimum(ad8, HIGH_PRESSURE_CAP) * as1

    result = PressureResult(
        trade_dates=trade_dates,
        as1=as1, as2=as2, ad2=ad2, as3=as3, ad3=ad3, as4=as4, ad4=ad4,
        as5=as5, ad5=ad5, as6=as6, ad6=ad6, as7=as7, ad7=ad7, as8=as8, ad8=ad8,
        a=a, a1=a1,
    )
    result.red_bars = [
        PressureBar(trade_date=int(trade_dates[i]), value=float(a[i]), start=0.0, end=float(a[i]))
        for i in np.flatnonzero(a > RED_BAR_FLOOR)
    ]
    result.green_bars = [
        PressureBar(
            trade_date=int(trade_dates[i]),
            value=float(a1[i]),
            start=0.0,
            end=float(GREEN_BAR_SCALE * a1[i]),
        )
        for i in np.flatnonzero(a1 > 0)
    ]
    return result
