"""
Bottom-Detection Composite

Builds a 0-4 price-position wave inside a rolling low/high band, smooths it
into an average line, and combines it with moving-average trend states,
volume, a blended RSI/stochastic risk coefficient and MACD/KDJ crossovers.
Each rule is an independent per-bar conjunction that emits one category.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from stockta.schemas.market import Bar
from stockta.schemas.signals import SignalCategory, SignalEvent, sort_events
from stockta.services.indicators.calculations import (
    cross,
    ema,
    hhv,
    llv,
    ma,
    ref,
    ref_bool,
    safe_ratio,
    scaled_ratio,
    sma,
)
from stockta.services.indicators.oscillators import (
    NEUTRAL_OSCILLATOR,
    gain_ratio,
    true_range_average,
    weighted_relative_strength,
    weighted_stochastic,
    williams_r,
)

MIN_BARS = 38

OVERBOUGHT_LINE = 3.2
OVERSOLD_LINE = 0.5
WAVE_LOW_WINDOW = 10
WAVE_HIGH_WINDOW = 25
WAVE_SCALE = 4

BOTTOM_OPEN_CLOSE_RATIO = 1.04
BOTTOM_LOW_CEILING = 688
BOTTOM_CLOSE_OPEN_RATIO = 1.01
ABSOLUTE_BOTTOM_OPEN_LOW_RATIO = 1.05
ESCAPE_LINE = 79
RISK_BUY_LINE = 20

# Rules compare against up to three bars back
FIRST_RULE_BAR = 3


@dataclass
class BottomDetectionResult:
    """Series and signal events of the bottom-detection composite."""

    trade_dates: np.ndarray

    # Reference lines
    overbought: np.ndarray
    oversold: np.ndarray
    min_value: np.ndarray
    max_value: np.ndarray
    wave_line: np.ndarray
    average_line: np.ndarray

    # Per-bar states
    info: np.ndarray
    strengthen: np.ndarray
    weaken: np.ndarray
    volume_signal: np.ndarray

    # Sub-indicators
    rsi5: np.ndarray
    adx: np.ndarray
    wr10: np.ndarray
    best_buy: np.ndarray
    buy_pressure: np.ndarray
    risk_coefficient: np.ndarray

    events: list[SignalEvent] = field(default_factory=list)

    def dates(self, category: SignalCategory) -> list[int]:
        return [e.trade_date for e in self.events if e.category == category]


def calculate_bottom_detection(bars: list[Bar]) -> Optional[BottomDetectionResult]:
    """
    Run the bottom-detection composite.

    Returns None below MIN_BARS bars.
    """
    if len(bars) < MIN_BARS:
        return None

    trade_dates = np.array([b.trade_date for b in bars], dtype=np.int64)
    opens = np.array([b.open for b in bars], dtype=float)
    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)
    volumes = np.array([b.volume for b in bars], dtype=float)
    n = len(bars)

    # 1. Wave band and state lines
    min_value = llv(lows, WAVE_LOW_WINDOW)
    max_value = hhv(highs, WAVE_HIGH_WINDOW)
    wave_raw = scaled_ratio(closes - min_value, max_value - min_value, WAVE_SCALE, 0.0)
    wave_line = ema(wave_raw, 4)
    average_line = ema(wave_line, 3)

    info = np.zeros(n, dtype=bool)
    info[1:] = average_line[1:] >= ref(average_line, 1)[1:]

    ma5 = ma(closes, 5)
    strengthen = (closes > ma(closes, 20)) & (closes > ma5)
    weaken = (closes < ma(closes, 10)) & (closes < ma5)
    volume_signal = volumes > ma(volumes, 5)

    # 2. RSI / ADX / WR
    rsi5 = gain_ratio(closes, 5, NEUTRAL_OSCILLATOR)
    adx = true_range_average(highs, lows, closes, 14)
    wr10 = williams_r(highs, lows, closes, 10)

    # 3. Best buy = (RSI5 + ADX) + (RSI5 - WR10), smoothed three times
    best_buy = (rsi5 + adx) + (rsi5 - wr10)
    pressure_fast = sma(best_buy, 3, 1)
    buy_pressure = sma(sma(pressure_fast, 3, 1), 3, 1)

    # 4. Risk coefficient
    risk_coefficient = 0.5 * weighted_relative_strength(closes) + 0.5 * weighted_stochastic(
        highs, lows, closes, 8
    )

    result = BottomDetectionResult(
        trade_dates=trade_dates,
        overbought=np.full(n, OVERBOUGHT_LINE),
        oversold=np.full(n, OVERSOLD_LINE),
        min_value=min_value,
        max_value=max_value,
        wave_line=wave_line,
        average_line=average_line,
        info=info,
        strengthen=strengthen,
        weaken=weaken,
        volume_signal=volume_signal,
        rsi5=rsi5,
        adx=adx,
        wr10=wr10,
        best_buy=best_buy,
        buy_pressure=buy_pressure,
        risk_coefficient=risk_coefficient,
    )

    # 5. Rule battery
    rules = _evaluate_rules(result, opens, highs, lows, closes, pressure_fast)
    golden = _golden_cross(highs, lows, closes)
    rules[SignalCategory.GOLDEN_CROSS] = golden

    events = []
    for category, fired in rules.items():
        for i in np.flatnonzero(fired):
            events.append(SignalEvent(trade_date=int(trade_dates[i]), category=category))
    result.events = sort_events(events)
    return result


def _evaluate_rules(
    result: BottomDetectionResult,
    opens: np.ndarray,
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    pressure_fast: np.ndarray,
) -> dict[SignalCategory, np.ndarray]:
    n = len(closes)
    info = result.info
    info1, info2, info3 = ref_bool(info, 1), ref_bool(info, 2), ref_bool(info, 3)
    strengthen1 = ref_bool(result.strengthen, 1)
    weaken1 = ref_bool(result.weaken, 1)
    avg = result.average_line

    prev_open = ref(opens, 1)
    prev_close = ref(closes, 1)
    prev_low = ref(lows, 1)
    prev_rsi5 = ref(result.rsi5, 1)

    # Ratios against a zero price never satisfy a > 1 threshold
    open_close_prev = safe_ratio(prev_open, prev_close, 0.0)
    close_open = safe_ratio(closes, opens, 0.0)
    open_low = safe_ratio(opens, lows, 0.0)

    turned_up = info & ~info1 & ~info2 & ~info3
    turned_down = ~info & info1 & info2 & info3
    wave_cross = cross(result.wave_line, avg)

    see_rise = wave_cross & (avg < OVERSOLD_LINE)

    rules = {
        SignalCategory.EXTREME_BOTTOM: turned_up & (avg < OVERSOLD_LINE),
        SignalCategory.RISE: turned_up & result.strengthen & ~strengthen1 & result.volume_signal,
        SignalCategory.BOTTOM: (
            (open_close_prev > BOTTOM_OPEN_CLOSE_RATIO)
            & (prev_low <= BOTTOM_LOW_CEILING)
            & (opens > prev_close)
            & (closes < prev_open)
            & (close_open >= BOTTOM_CLOSE_OPEN_RATIO)
        ),
        SignalCategory.ABSOLUTE_BOTTOM: (
            info & ~info1 & (avg < OVERSOLD_LINE) & (open_low > ABSOLUTE_BOTTOM_OPEN_LOW_RATIO)
        ),
        SignalCategory.SEE_RISE: see_rise,
        SignalCategory.MUST_RISE: (
            see_rise & result.volume_signal & (close_open >= BOTTOM_CLOSE_OPEN_RATIO)
        ),
        SignalCategory.BUILD_POSITION: cross(pressure_fast, result.buy_pressure) & (closes > opens),
        SignalCategory.BOTTOM_FISHING: (
            (result.risk_coefficient < RISK_BUY_LINE) & (lows >= prev_low) & (closes > lows)
        ),
        SignalCategory.TOP: turned_down & (avg > OVERBOUGHT_LINE),
        SignalCategory.DOWN: turned_down & result.weaken & ~weaken1 & result.volume_signal,
        SignalCategory.ESCAPE: (prev_rsi5 > ESCAPE_LINE) & (result.rsi5 < prev_rsi5),
    }

    warmup = np.arange(n) < FIRST_RULE_BAR
    for category in rules:
        rules[category] = rules[category] & ~warmup
    return rules


def _golden_cross(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """MACD golden cross (DIF scaled by 100) on the same bar as a KDJ golden cross."""
    dif = (ema(closes, 12) - ema(closes, 26)) * 100
    dea = ema(dif, 9)

    top = hhv(highs, 9)
    bottom = llv(lows, 9)
    rsv = scaled_ratio(closes - bottom, top - bottom, 100, NEUTRAL_OSCILLATOR)
    k = sma(rsv, 9, 3)
    d = sma(k, 9, 3)

    return cross(dif, dea) & cross(k, d)
