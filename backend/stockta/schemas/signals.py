"""
CONTRACT 3: Signal Events

Discrete buy/sell/warning observations emitted by the composite pipelines.
Recomputing over the same bars reproduces the same event list.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class SignalSide(str, Enum):
    BUY = "buy"
    SELL = "sell"
    WARNING = "warning"


class SignalCategory(str, Enum):
    # Oscillator crossovers
    MACD_GOLDEN_CROSS = "macd-golden-cross"
    MACD_DEAD_CROSS = "macd-dead-cross"
    KDJ_GOLDEN_CROSS = "kdj-golden-cross"
    KDJ_DEAD_CROSS = "kdj-dead-cross"

    # Bottom-detection composite
    EXTREME_BOTTOM = "extreme-bottom"
    RISE = "rise"
    BOTTOM = "bottom"
    ABSOLUTE_BOTTOM = "absolute-bottom"
    SEE_RISE = "see-rise"
    MUST_RISE = "must-rise"
    GOLDEN_CROSS = "golden-cross"
    BUILD_POSITION = "build-position"
    BOTTOM_FISHING = "bottom-fishing"
    TOP = "top"
    DOWN = "down"
    ESCAPE = "escape"

    # Support/resistance trend ladder
    PREPARE_BUY = "prepare-buy"
    READY_BUY = "ready-buy"
    ACTUAL_BUY = "actual-buy"
    STAR_BUY = "star-buy"
    PREPARE_SELL = "prepare-sell"
    READY_SELL = "ready-sell"
    ACTUAL_SELL = "actual-sell"
    STAR_SELL = "star-sell"

    # Reversal-triangle composite
    TRIANGLE_BUY = "triangle-buy"
    BIG_BOTTOM = "big-bottom"
    OVERHEAT_WARNING = "overheat-warning"

    @property
    def side(self) -> SignalSide:
        return _CATEGORY_SIDES[self]


_CATEGORY_SIDES = {
    SignalCategory.MACD_GOLDEN_CROSS: SignalSide.BUY,
    SignalCategory.MACD_DEAD_CROSS: SignalSide.SELL,
    SignalCategory.KDJ_GOLDEN_CROSS: SignalSide.BUY,
    SignalCategory.KDJ_DEAD_CROSS: SignalSide.SELL,
    SignalCategory.EXTREME_BOTTOM: SignalSide.BUY,
    SignalCategory.RISE: SignalSide.BUY,
    SignalCategory.BOTTOM: SignalSide.BUY,
    SignalCategory.ABSOLUTE_BOTTOM: SignalSide.BUY,
    SignalCategory.SEE_RISE: SignalSide.BUY,
    SignalCategory.MUST_RISE: SignalSide.BUY,
    SignalCategory.GOLDEN_CROSS: SignalSide.BUY,
    SignalCategory.BUILD_POSITION: SignalSide.BUY,
    SignalCategory.BOTTOM_FISHING: SignalSide.BUY,
    SignalCategory.TOP: SignalSide.SELL,
    SignalCategory.DOWN: SignalSide.SELL,
    SignalCategory.ESCAPE: SignalSide.SELL,
    SignalCategory.PREPARE_BUY: SignalSide.WARNING,
    SignalCategory.READY_BUY: SignalSide.WARNING,
    SignalCategory.ACTUAL_BUY: SignalSide.BUY,
    SignalCategory.STAR_BUY: SignalSide.BUY,
    SignalCategory.PREPARE_SELL: SignalSide.WARNING,
    SignalCategory.READY_SELL: SignalSide.WARNING,
    SignalCategory.ACTUAL_SELL: SignalSide.SELL,
    SignalCategory.STAR_SELL: SignalSide.SELL,
    SignalCategory.TRIANGLE_BUY: SignalSide.BUY,
    SignalCategory.BIG_BOTTOM: SignalSide.BUY,
    SignalCategory.OVERHEAT_WARNING: SignalSide.WARNING,
}

_CATEGORY_ORDER = {category: i for i, category in enumerate(SignalCategory)}


class SignalEvent(BaseModel):
    """A signal category observed on one trade date."""

    model_config = ConfigDict(frozen=True)

    trade_date: int
    category: SignalCategory

    # Boundary a graded signal crossed, e.g. the ladder tier of an actual buy
    level: Optional[float] = None

    @property
    def side(self) -> SignalSide:
        return self.category.side

    def sort_key(self) -> tuple[int, int]:
        return (self.trade_date, _CATEGORY_ORDER[self.category])


def sort_events(events: list[SignalEvent]) -> list[SignalEvent]:
    """Order events by trade date, then by category declaration order."""
    return sorted(events, key=SignalEvent.sort_key)
