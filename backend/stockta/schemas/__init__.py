"""
StockTA Schema Contracts

This module defines the contracts between the engine and its collaborators.
"""

from stockta.schemas.market import (
    Bar,
    DaySnapshot,
    Period,
    parse_trade_date,
)
from stockta.schemas.indicators import (
    IndicatorRequest,
    IndicatorRow,
)
from stockta.schemas.signals import (
    SignalCategory,
    SignalEvent,
    SignalSide,
    sort_events,
)

__all__ = [
    # Market
    "Bar",
    "DaySnapshot",
    "Period",
    "parse_trade_date",
    # Indicators
    "IndicatorRequest",
    "IndicatorRow",
    # Signals
    "SignalCategory",
    "SignalEvent",
    "SignalSide",
    "sort_events",
]
