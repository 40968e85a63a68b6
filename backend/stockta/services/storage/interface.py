"""
Indicator Store Interface

Storage collaborator consumed by the batch runner. Implementations own all
blocking I/O; the indicator engine never touches storage directly.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from stockta.schemas.indicators import IndicatorRow
from stockta.schemas.market import Bar, Period


class IndicatorStore(ABC):
    """
    Storage Contract.

    - get_bars: ascending bars of a symbol and period
    - get_last_indicator_rows: newest persisted rows, ascending
    - upsert_indicator_rows: idempotent upsert keyed by
      (symbol, trade_date, period)

    Implementations must serialize writes per symbol.

    Raises:
        StorageError: on any backend failure
    """

    @abstractmethod
    async def get_bars(
        self,
        symbol: str,
        period: Period = Period.DAILY,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Bar]:
        """
        Bars between start_date and end_date inclusive.

        With a limit, the newest ``limit`` bars of that range.
        """
        pass

    @abstractmethod
    async def get_last_indicator_rows(
        self, symbol: str, period: Period = Period.DAILY, n: int = 2
    ) -> list[IndicatorRow]:
        pass

    @abstractmethod
    async def upsert_indicator_rows(self, rows: Sequence[IndicatorRow]) -> int:
        """Insert or replace rows; returns the number of rows written."""
        pass
