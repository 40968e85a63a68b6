"""
CONTRACT 1: Bar Source

Input: ordered bar sequence per symbol
Output: consumed by the indicator engine

A single bar type serves every period (daily, weekly, monthly, yearly);
the period only labels the rows computed from it.
"""

from datetime import date
from enum import Enum
from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class Period(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# =============================================================================
# BARS
# =============================================================================


def parse_trade_date(trade_date: int) -> date:
    """Convert a YYYYMMDD integer into a date."""
    return date(trade_date // 10000, trade_date // 100 % 100, trade_date % 100)


class Bar(BaseModel):
    """Single OHLCV bar keyed by an integer trade date (YYYYMMDD)."""

    symbol: str = Field(default="", description="Ts code, e.g. 000001.SZ")
    trade_date: int = Field(..., description="Trade date as YYYYMMDD")
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    volume: int = Field(default=0, ge=0)
    amount: float = Field(default=0.0, ge=0)

    @field_validator("trade_date")
    @classmethod
    def _valid_trade_date(cls, value: int) -> int:
        try:
            parse_trade_date(value)
        except ValueError as e:
            raise ValueError(f"trade_date {value} is not a YYYYMMDD date") from e
        return value

    @property
    def code(self) -> str:
        """Symbol without its exchange suffix (000001.SZ -> 000001)."""
        return self.symbol.split(".")[0]

    @property
    def year(self) -> int:
        return self.trade_date // 10000


class DaySnapshot(BaseModel):
    """
    Live quote of a single day.

    The support/resistance ladder derives its static levels from this
    snapshot rather than from the bar history.
    """

    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)

    @classmethod
    def from_bar(cls, bar: Bar) -> "DaySnapshot":
        return cls(open=bar.open, high=bar.high, low=bar.low, close=bar.close)
