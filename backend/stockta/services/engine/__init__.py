"""
Indicator Engine Service

CONTRACT:
    Input:  IndicatorRequest (bars of one symbol and period)
    Output: ComputeResult

RESPONSIBILITIES:
    - Build persisted indicator rows (MA, RSI, MACD, KDJ)
    - Detect MACD / KDJ crossovers
    - Run the composite signal pipelines
    - Incremental recompute from the persisted tail

PURE PYTHON - No I/O. Same bars in, same result out.
"""

from stockta.services.engine.interface import IndicatorServiceInterface
from stockta.services.engine.service import ComputeResult, IndicatorService, crossover_events

__all__ = [
    "ComputeResult",
    "IndicatorServiceInterface",
    "IndicatorService",
    "crossover_events",
]
