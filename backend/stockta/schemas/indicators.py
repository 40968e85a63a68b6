"""
CONTRACT 2: Indicator Engine

Input: IndicatorRequest (bars of one symbol and period)
Output: IndicatorRow per bar, plus composite pipeline results

An IndicatorRow is also the persisted oscillator state: the MACD and KDJ
fields of the newest rows are enough to continue the recurrences without
replaying history.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from stockta.schemas.market import Bar, DaySnapshot, Period


# =============================================================================
# INPUT: IndicatorRequest
# =============================================================================


class IndicatorRequest(BaseModel):
    """
    Request for indicator calculation.
    Sent by: Batch runner / API layer
    Received by: Indicator Service

    Note: prior_rows switches the service to incremental recompute.
    """

    symbol: str = Field(..., description="Symbol the bars belong to")
    period: Period = Period.DAILY
    bars: list[Bar]
    prior_rows: Optional[list["IndicatorRow"]] = None
    snapshot: Optional[DaySnapshot] = None


# =============================================================================
# OUTPUT: IndicatorRow
# =============================================================================


class IndicatorRow(BaseModel):
    """Indicator values of one bar, keyed by (symbol, trade_date, period)."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    trade_date: int
    period: Period = Period.DAILY

    # Moving averages (0 until the window is full)
    ma5: float = 0.0
    ma10: float = 0.0
    ma20: float = 0.0
    ma60: float = 0.0

    # Relative strength, 0-100
    rsi6: float = 0.0
    rsi12: float = 0.0
    rsi24: float = 0.0

    # MACD state and outputs
    macd: float = 0.0
    macd_ema1: float = 0.0
    macd_ema2: float = 0.0
    macd_dif: float = 0.0
    macd_dea: float = 0.0

    # KDJ state and outputs
    kdj_k: float = 0.0
    kdj_d: float = 0.0
    kdj_j: float = 0.0

    @property
    def key(self) -> tuple[str, int, Period]:
        return (self.symbol, self.trade_date, self.period)


IndicatorRequest.model_rebuild()
