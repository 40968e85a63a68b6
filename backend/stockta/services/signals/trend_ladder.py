"""
Support/Resistance Trend Ladder

Static support, resistance and center levels come from a single day's
quote snapshot. The trend line is a double-smoothed position of the close
inside its 55-bar range, bounded roughly to 0-100.

Signals form a tier ladder on each side. Every bar is classified from the
trend value and its previous value only; no tier state is carried between
bars.

Buy side (close below center):
    trend < 11                                  prepare-buy
    trend < 11 for 15 bars                      ready-buy
    crosses up through 11                       star-buy
    crosses up through 11 / 6 / 3 / 1 / 0       actual-buy

Sell side (close above center) mirrors around 89 / 94 / 97 / 99 / 100.

Actual buy and sell events carry the crossed boundary as their level.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from stockta.schemas.market import Bar, DaySnapshot
from stockta.schemas.signals import SignalCategory, SignalEvent, sort_events
from stockta.services.indicators.calculations import (
    ema,
    every,
    hhv,
    llv,
    ref,
    scaled_ratio,
    sma,
)

MIN_BARS = 55

TREND_WINDOW = 55
TOP_LEVEL = 89.0
BOTTOM_LEVEL = 11.0
MIDDLE_LEVEL = 50.0
SUSTAINED_BARS = 15

RESISTANCE_FRACTION = 7 / 8
SUPPORT_FRACTION = 0.5 / 8

# Bounds of the previous trend value per tier. A buy fires on a cross up
# through the first bound, a sell on a cross down through the first bound.
BUY_TIERS = ((11.0, 6.0), (6.0, 3.0), (3.0, 1.0), (1.0, 0.0))
SELL_TIERS = ((89.0, 94.0), (94.0, 97.0), (97.0, 99.0), (99.0, 100.0))


@dataclass(frozen=True)
class LadderLevels:
    resistance: float
    support: float
    center: float

    @classmethod
    def from_snapshot(cls, snapshot: DaySnapshot) -> "LadderLevels":
        h1 = max(snapshot.open, snapshot.high)
        l1 = min(snapshot.open, snapshot.low)
        p1 = h1 - l1
        resistance = l1 + p1 * RESISTANCE_FRACTION
        support = l1 + p1 * SUPPORT_FRACTION
        return cls(resistance=resistance, support=support, center=(support + resistance) / 2)


@dataclass
class TrendLadderResult:
    trade_dates: np.ndarray
    closes: np.ndarray

    resistance: np.ndarray
    support: np.ndarray
    center_line: np.ndarray

    trend_line: np.ndarray
    v11: np.ndarray
    v12: np.ndarray  # trend change rate, percent

    events: list[SignalEvent] = field(default_factory=list)

    top_level: float = TOP_LEVEL
    bottom_level: float = BOTTOM_LEVEL
    middle_level: float = MIDDLE_LEVEL

    def dates(self, category: SignalCategory) -> list[int]:
        return [e.trade_date for e in self.events if e.category == category]

    def signal_summary(self) -> dict[str, Any]:
        """Latest trend reading plus actual buy/sell counts and dates."""
        summary: dict[str, Any] = {}
        if len(self.trend_line) == 0:
            return summary

        latest_trend = float(self.trend_line[-1])
        summary["current_trend"] = latest_trend
        summary["trend_level"] = trend_zone(latest_trend)
        summary["position_vs_center"] = _position(float(self.closes[-1]), float(self.center_line[-1]))

        buys = self.dates(SignalCategory.ACTUAL_BUY)
        sells = self.dates(SignalCategory.ACTUAL_SELL)
        summary["buy_signals_count"] = len(buys)
        summary["sell_signals_count"] = len(sells)
        if buys:
            summary["last_buy_signal"] = buys[-1]
        if sells:
            summary["last_sell_signal"] = sells[-1]
        return summary


def trend_zone(trend: float) -> str:
    if trend < BOTTOM_LEVEL:
        return "oversold"
    if trend < 30:
        return "weak"
    if trend < 70:
        return "ranging"
    if trend <= TOP_LEVEL:
        return "strong"
    return "overbought"


def _position(close: float, center: float) -> str:
    if close < center:
        return "below"
    if close > center:
        return "above"
    return "at"


def calculate_trend_ladder(
    bars: list[Bar], snapshot: Optional[DaySnapshot] = None
) -> Optional[TrendLadderResult]:
    """
    Run the support/resistance trend ladder.

    Args:
        bars: ascending bars, at least MIN_BARS of them
        snapshot: quote the levels derive from; defaults to the last bar

    Returns None below MIN_BARS bars.
    """
    if len(bars) < MIN_BARS:
        return None

    snapshot = snapshot or DaySnapshot.from_bar(bars[-1])
    n = len(bars)

    trade_dates = np.array([b.trade_date for b in bars], dtype=np.int64)
    highs = np.array([b.high for b in bars], dtype=float)
    lows = np.array([b.low for b in bars], dtype=float)
    closes = np.array([b.close for b in bars], dtype=float)

    levels = LadderLevels.from_snapshot(snapshot)

    # V11 := 3*SMA(RAW,5,1) - 2*SMA(SMA(RAW,5,1),3,1)
    bottom = llv(lows, TREND_WINDOW)
    top = hhv(highs, TREND_WINDOW)
    raw = scaled_ratio(closes - bottom, top - bottom, 100, MIDDLE_LEVEL)
    sma1 = sma(raw, 5, 1)
    sma2 = sma(sma1, 3, 1)
    v11 = 3 * sma1 - 2 * sma2
    trend = ema(v11, 3)

    previous = ref(trend, 1)
    v12 = scaled_ratio(trend - previous, previous, 100, 0.0)
    v12[0] = 0.0

    result = TrendLadderResult(
        trade_dates=trade_dates,
        closes=closes,
        resistance=np.full(n, levels.resistance),
        support=np.full(n, levels.support),
        center_line=np.full(n, levels.center),
        trend_line=trend,
        v11=v11,
        v12=v12,
    )

    rules = ladder_rules(trend, previous, closes, result.center_line)
    graders = {
        SignalCategory.ACTUAL_BUY: buy_tier,
        SignalCategory.ACTUAL_SELL: sell_tier,
    }
    events = []
    for category, fired in rules.items():
        grade = graders.get(category)
        for i in np.flatnonzero(fired):
            level = grade(float(previous[i]), float(trend[i])) if grade else None
            events.append(
                SignalEvent(trade_date=int(trade_dates[i]), category=category, level=level)
            )
    result.events = sort_events(events)
    return result


def buy_tier(previous: float, current: float) -> Optional[float]:
    """Boundary an actual buy crossed up through: 11, 6, 3, 1 or 0."""
    if previous < 0 < current:
        return 0.0
    for upper, lower in BUY_TIERS:
        if lower < previous < upper < current:
            return upper
    return None


def sell_tier(previous: float, current: float) -> Optional[float]:
    """Boundary an actual sell crossed down through: 89, 94, 97, 99 or 100."""
    if previous > 100 > current:
        return 100.0
    for lower, upper in SELL_TIERS:
        if upper > previous > lower > current:
            return lower
    return None


def ladder_rules(
    trend: np.ndarray, previous: np.ndarray, closes: np.ndarray, center: np.ndarray
) -> dict[SignalCategory, np.ndarray]:
    """Boolean firing mask per ladder category."""
    n = len(trend)
    has_previous = np.arange(n) >= 1
    below_center = closes < center
    above_center = closes > center

    star_buy = (previous < BOTTOM_LEVEL) & (trend > BOTTOM_LEVEL)
    actual_buy = (previous < 0) & (trend > 0)
    for upper, lower in BUY_TIERS:
        actual_buy |= (previous < upper) & (previous > lower) & (trend > upper)

    star_sell = (previous > TOP_LEVEL) & (trend < TOP_LEVEL)
    actual_sell = (previous > 100) & (trend < 100)
    for lower, upper in SELL_TIERS:
        actual_sell |= (previous > lower) & (previous < upper) & (trend < lower)

    return {
        SignalCategory.PREPARE_BUY: trend < BOTTOM_LEVEL,
        SignalCategory.READY_BUY: (
            (trend < BOTTOM_LEVEL) & every(trend <= BOTTOM_LEVEL, SUSTAINED_BARS) & below_center
        ),
        SignalCategory.ACTUAL_BUY: actual_buy & below_center & has_previous,
        SignalCategory.STAR_BUY: star_buy & below_center & has_previous,
        SignalCategory.PREPARE_SELL: trend > TOP_LEVEL,
        SignalCategory.READY_SELL: (
            (trend > TOP_LEVEL) & every(trend > TOP_LEVEL, SUSTAINED_BARS) & above_center
        ),
        SignalCategory.ACTUAL_SELL: actual_sell & above_center & has_previous,
        SignalCategory.STAR_SELL: star_sell & above_center & has_previous,
    }
