"""
Composite Signal Pipelines

CONTRACT:
    Input:  ascending bars of one symbol and period
    Output: a pipeline result, or None below the pipeline's minimum bar count

PIPELINES:
    - bottom:        bottom-detection composite (38 bars)
    - pressure:      time-decay pressure composite (58 bars)
    - trend_ladder:  support/resistance trend ladder (55 bars)
    - reversal:      reversal-triangle composite (33 bars)

Each pipeline is a pure function of its bars. None means "not enough
history yet", an empty event list means "analyzed, nothing found".
"""

from stockta.services.signals.bottom import BottomDetectionResult, calculate_bottom_detection
from stockta.services.signals.pressure import PressureBar, PressureResult, calculate_pressure
from stockta.services.signals.reversal import ReversalResult, calculate_reversal
from stockta.services.signals.trend_ladder import (
    LadderLevels,
    TrendLadderResult,
    buy_tier,
    calculate_trend_ladder,
    ladder_rules,
    sell_tier,
    trend_zone,
)

__all__ = [
    "BottomDetectionResult",
    "calculate_bottom_detection",
    "PressureBar",
    "PressureResult",
    "calculate_pressure",
    "ReversalResult",
    "calculate_reversal",
    "LadderLevels",
    "TrendLadderResult",
    "calculate_trend_ladder",
    "ladder_rules",
    "buy_tier",
    "sell_tier",
    "trend_zone",
]
