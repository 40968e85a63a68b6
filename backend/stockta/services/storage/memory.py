"""
In-memory indicator store.

Keeps bars and indicator rows in dicts, one asyncio.Lock per symbol so
concurrent batch workers never interleave writes for the same symbol.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Optional, Sequence, Tuple

from stockta.schemas.indicators import IndicatorRow
from stockta.schemas.market import Bar, Period
from stockta.services.base import StorageError
from stockta.services.storage.interface import IndicatorStore

logger = logging.getLogger(__name__)


class InMemoryIndicatorStore(IndicatorStore):
    """
    Dict-backed store.

    Keys:
    - bars: (symbol, period) -> {trade_date: Bar}
    - rows: (symbol, period) -> {trade_date: IndicatorRow}
    """

    name = "InMemoryIndicatorStore"

    def __init__(self):
        self._bars: Dict[Tuple[str, Period], Dict[int, Bar]] = defaultdict(dict)
        self._rows: Dict[Tuple[str, Period], Dict[int, IndicatorRow]] = defaultdict(dict)
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, symbol: str) -> asyncio.Lock:
        if symbol not in self._locks:
            self._locks[symbol] = asyncio.Lock()
        return self._locks[symbol]

    # =========================================================================
    # BARS
    # =========================================================================

    async def add_bars(
        self, symbol: str, bars: Sequence[Bar], period: Period = Period.DAILY
    ) -> int:
        """Insert or replace bars by trade date."""
        async with self._lock(symbol):
            stored = self._bars[(symbol, period)]
            for bar in bars:
                if bar.symbol and bar.symbol != symbol:
                    raise StorageError(
                        self.name,
                        f"Bar for {bar.symbol} cannot be stored under {symbol}",
                        {"trade_date": bar.trade_date},
                    )
                stored[bar.trade_date] = bar
            return len(bars)

    async def get_bars(
        self,
        symbol: str,
        period: Period = Period.DAILY,
        start_date: Optional[int] = None,
        end_date: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[Bar]:
        stored = self._bars.get((symbol, period), {})
        dates = [
            d for d in sorted(stored)
            if (start_date is None or d >= start_date) and (end_date is None or d <= end_date)
        ]
        if limit is not None:
            dates = dates[max(len(dates) - limit, 0):]
        return [stored[d] for d in dates]

    # =========================================================================
    # INDICATOR ROWS
    # =========================================================================

    async def get_last_indicator_rows(
        self, symbol: str, period: Period = Period.DAILY, n: int = 2
    ) -> list[IndicatorRow]:
        stored = self._rows.get((symbol, period), {})
        dates = sorted(stored)[max(len(stored) - n, 0):]
        return [stored[d] for d in dates]

    async def get_indicator_rows(
        self, symbol: str, period: Period = Period.DAILY
    ) -> list[IndicatorRow]:
        stored = self._rows.get((symbol, period), {})
        return [stored[d] for d in sorted(stored)]

    async def upsert_indicator_rows(self, rows: Sequence[IndicatorRow]) -> int:
        by_symbol: Dict[str, list[IndicatorRow]] = defaultdict(list)
        for row in rows:
            by_symbol[row.symbol].append(row)

        written = 0
        for symbol, symbol_rows in by_symbol.items():
            async with self._lock(symbol):
                for row in symbol_rows:
                    self._rows[(row.symbol, row.period)][row.trade_date] = row
                    written += 1
        logger.debug(f"Upserted {written} indicator rows for {len(by_symbol)} symbols")
        return written
