"""
Reversal-Triangle Composite

A bottom-fishing line built from the close's position in its 27-bar
range. The buy fires when the trend line crosses its base line 1; the
over-heat warning fires when it drops back below 100. A separate
big-bottom check flags closes stretched far below their short averages.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from stockta.schemas.market import Bar
from stockta.schemas.signals import SignalCategory, SignalEvent, sort_events
from stockta.services.indicators.calculations import (
    abs_series,
    cross,
    ema,
    hhv,
    if_else,
    llv,
    ma,
    ref,
    safe_ratio,
    scaled_ratio,
    sma,
)

MIN_BARS = 33

POSITION_WINDOW = 27
LOW_WINDOW = 33
BASE_LINE = 1.0
OVERHEAT_LINE = 100.0
SIGNAL_VALUE = 100.0
BIG_BOTTOM_GAP = 0.04


@dataclass
class ReversalResult:
    trade_dates: np.ndarray

    var1: np.ndarray  # previous bar's average price
    var2: np.ndarray
    var3: np.ndarray
    var4: np.ndarray  # 33-bar lowest low
    var5: np.ndarray
    trend: np.ndarray
    base_line: np.ndarray
    buy_line: np.ndarray  # 100 on a triangle buy, else 0
    big_bottom: np.ndarray  # 100 on a big bottom, else 0

    events: list[SignalEvent] = field(default_factory=list)

    def dates(self, category: SignalCategory) -> list[int]:
        return [e.trade_date for e in self.events if e.category == category]


def calculate_reversal(bars: list[Bar]) -> Optional[ReversalResult]:
    """
    Run the reversal-triangle composite.

    Returns None below MIN_BARS bars.
    """
    if len(bars) < MIN_BARS:
        return None

    trade_dates = np.array([b.trade_date for b in bars], dtype=np.int64)
    opens = np.array([b.open for b in bars], dtype=float)
    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)
    n = len(bars)

    var1 = ref((lows + opens + closes + highs) / 4, 1)
    drop = lows - var1
    var2 = safe_ratio(sma(abs_series(drop), 13, 1), sma(np.maximum(drop, 0), 10, 1), 0.0)
    var3 = ema(var2, 10)
    var4 = llv(lows, LOW_WINDOW)

    # QUSHI := 3*SMA(A,5,1) - 2*SMA(SMA(A,5,1),9,1)
    bottom = llv(lows, POSITION_WINDOW)
    top = hhv(highs, POSITION_WINDOW)
    position = scaled_ratio(closes - bottom, top - bottom, 100, 0.0)
    smooth = sma(position, 5, 1)
    trend = 3 * smooth - 2 * sma(smooth, 9, 1)

    base_line = np.full(n, BASE_LINE)
    triangle_buy = cross(trend, base_line)
    var5 = ema(if_else(lows <= var4, var3, 0.0), 3)

    ma5 = ma(closes, 5)
    ma10 = ma(closes, 10)
    stretched = (closes != 0) & (safe_ratio(ma5 - closes, closes, 0.0) > BIG_BOTTOM_GAP)
    sagging = (ma5 != 0) & (safe_ratio(ma10 - ma5, ma5, 0.0) > BIG_BOTTOM_GAP)
    big_bottom = stretched & sagging

    overheat = cross(OVERHEAT_LINE, trend)

    result = ReversalResult(
        trade_dates=trade_dates,
        var1=var1,
        var2=var2,
        var3=var3,
        var4=var4,
        var5=var5,
        trend=trend,
        base_line=base_line,
        buy_line=if_else(triangle_buy, SIGNAL_VALUE, 0.0),
        big_bottom=if_else(big_bottom, SIGNAL_VALUE, 0.0),
    )

    rules = {
        SignalCategory.TRIANGLE_BUY: triangle_buy,
        SignalCategory.BIG_BOTTOM: big_bottom,
        SignalCategory.OVERHEAT_WARNING: overheat,
    }
    events = []
    for category, fired in rules.items():
        for i in np.flatnonzero(fired):
            events.append(SignalEvent(trade_date=int(trade_dates[i]), category=category))
    result.events = sort_events(events)
    return result
