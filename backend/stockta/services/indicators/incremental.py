"""
Incremental Recompute Controller

Decides which suffix of a bar history needs recomputing given the newest
persisted indicator rows, and rebuilds the oscillator seed states from
them.

The anchor is the second-to-last persisted row. Its bar is located in the
current history by trade date; everything after it (the last persisted
row plus all newer bars) is recomputed from the anchor's state, so the
newest persisted row is always re-derived.
"""

import bisect
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from stockta.schemas.indicators import IndicatorRow
from stockta.schemas.market import Bar, Period
from stockta.services.indicators.oscillators import KDJState, MACDState

logger = logging.getLogger(__name__)

# One row to seed from, one to re-derive
MIN_TAIL_ROWS = 2


@dataclass(frozen=True)
class RecomputePlan:
    """
    Where a recompute starts and the state it starts from.

    start == 0 with no anchor means a full recompute from the series
    origin.
    """

    start: int
    anchor: Optional[IndicatorRow] = None
    reason: str = ""

    @property
    def is_full(self) -> bool:
        return self.anchor is None

    @property
    def macd_seed(self) -> Optional[MACDState]:
        if self.anchor is None:
            return None
        return macd_state_from_row(self.anchor)

    @property
    def kdj_seed(self) -> Optional[KDJState]:
        if self.anchor is None:
            return None
        return kdj_state_from_row(self.anchor)


def macd_state_from_row(row: IndicatorRow) -> MACDState:
    return MACDState(
        ema_fast=row.macd_ema1,
        ema_slow=row.macd_ema2,
        dif=row.macd_dif,
        dea=row.macd_dea,
        macd=row.macd,
    )


def kdj_state_from_row(row: IndicatorRow) -> KDJState:
    return KDJState(k=row.kdj_k, d=row.kdj_d, j=row.kdj_j)


def find_bar_index(bars: Sequence[Bar], trade_date: int) -> Optional[int]:
    """Index of the bar with ``trade_date`` in ascending bars, or None."""
    dates = [b.trade_date for b in bars]
    i = bisect.bisect_left(dates, trade_date)
    if i < len(dates) and dates[i] == trade_date:
        return i
    return None


def _foreign_row(
    rows: Sequence[IndicatorRow], symbol: Optional[str], period: Optional[Period]
) -> Optional[IndicatorRow]:
    """First row keyed to another symbol or period, if any."""
    for row in rows:
        if symbol and row.symbol != symbol:
            return row
        if period is not None and row.period != period:
            return row
    return None


def plan_recompute(
    bars: Sequence[Bar],
    prior_rows: Optional[Sequence[IndicatorRow]],
    symbol: Optional[str] = None,
    period: Optional[Period] = None,
) -> RecomputePlan:
    """
    Plan a recompute of ``bars`` given the persisted tail ``prior_rows``.

    Args:
        bars: full ascending bar history
        prior_rows: newest persisted rows, in any order
        symbol: symbol of the bars; rows of another symbol are rejected
        period: period being computed; rows of another period are rejected

    Returns:
        A full plan when fewer than two rows are persisted, the tail belongs
        to another symbol or period, or the anchor date is missing from the
        history. Otherwise a plan starting right after the anchor bar.
    """
    if not prior_rows or len(prior_rows) < MIN_TAIL_ROWS:
        return RecomputePlan(start=0, reason="no persisted tail")

    tail = sorted(prior_rows, key=lambda row: row.trade_date)

    foreign = _foreign_row(tail, symbol, period)
    if foreign is not None:
        logger.warning(
            f"Persisted row {foreign.symbol} {foreign.period.value} {foreign.trade_date} "
            f"does not match {symbol} {period.value if period else ''}, recomputing from scratch"
        )
        return RecomputePlan(
            start=0, reason=f"tail keyed to {foreign.symbol} {foreign.period.value}"
        )

    anchor = tail[-2]
    index = find_bar_index(bars, anchor.trade_date)
    if index is None:
        logger.warning(
            f"Persisted row {anchor.trade_date} for {anchor.symbol} not found in bar history, "
            f"recomputing from scratch"
        )
        return RecomputePlan(start=0, reason=f"anchor {anchor.trade_date} not in history")

    return RecomputePlan(start=index + 1, anchor=anchor, reason=f"anchor {anchor.trade_date}")


def merge_rows(
    existing: Sequence[IndicatorRow], recomputed: Sequence[IndicatorRow]
) -> list[IndicatorRow]:
    """Overlay recomputed rows on existing ones by trade date, ascending."""
    merged = {row.trade_date: row for row in existing}
    for row in recomputed:
        merged[row.trade_date] = row
    return [merged[d] for d in sorted(merged)]
