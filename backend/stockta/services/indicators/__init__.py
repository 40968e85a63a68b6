"""
Indicator Math

Rolling-window primitives, oscillator recurrences and the incremental
recompute controller. NumPy only, no I/O, no logging in the math.
"""

from stockta.services.indicators.incremental import (
    RecomputePlan,
    merge_rows,
    plan_recompute,
)
from stockta.services.indicators.oscillators import (
    KDJState,
    MACDState,
    OscillatorParams,
    kdj_series,
    macd_series,
)

__all__ = [
    "RecomputePlan",
    "merge_rows",
    "plan_recompute",
    "KDJState",
    "MACDState",
    "OscillatorParams",
    "kdj_series",
    "macd_series",
]
