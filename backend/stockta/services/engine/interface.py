"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

from stockta.services.base import BaseService
from stockta.schemas.market import Bar, DaySnapshot, Period
from stockta.schemas.indicators import IndicatorRequest, IndicatorRow

if TYPE_CHECKING:
    from stockta.services.engine.service import ComputeResult


class IndicatorServiceInterface(BaseService[IndicatorRequest, "ComputeResult"]):
    """
    Indicator Engine Service Contract.

    INPUT: IndicatorRequest
        - bars: ascending bars of one symbol and period
        - prior_rows: newest persisted rows (switches to incremental mode)

    OUTPUT: ComputeResult
        - rows: one IndicatorRow per computed bar
        - signals: every signal event, sorted by trade date
        - bottom / pressure / ladder / reversal: pipeline results or None
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    def compute(
        self,
        bars: Sequence[Bar],
        period: Period = Period.DAILY,
        symbol: Optional[str] = None,
        snapshot: Optional[DaySnapshot] = None,
    ) -> "ComputeResult":
        """
        Compute every series and signal from the series origin.

        Pure: the same bars always give the same result.

        Raises:
            BarSequenceError: dates not strictly increasing or mixed symbols
        """
        pass

    @abstractmethod
    def compute_incremental(
        self,
        bars: Sequence[Bar],
        prior_rows: Sequence[IndicatorRow],
        period: Period = Period.DAILY,
        symbol: Optional[str] = None,
        snapshot: Optional[DaySnapshot] = None,
    ) -> "ComputeResult":
        """
        Recompute only the suffix after the persisted anchor row.

        Falls back to compute() when the anchor cannot be located.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
