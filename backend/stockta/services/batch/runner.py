"""
Batch Indicator Runner

Recomputes indicator rows for many symbols. Symbols are independent, so
up to ``batch_max_workers`` run concurrently; the periods of one symbol
run in sequence. A failing symbol is logged and recorded, never aborts
the batch. Cancellation is checked before each symbol starts.

Usage:
    runner = IndicatorBatchRunner(store, IndicatorService())
    report = await runner.run(["000001.SZ", "600000.SH"])
"""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Sequence

from stockta.core.config import Settings, get_settings
from stockta.schemas.indicators import IndicatorRequest
from stockta.schemas.market import Period
from stockta.services.engine.interface import IndicatorServiceInterface
from stockta.services.storage.interface import IndicatorStore

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Outcome of one batch run, symbols in input order."""

    succeeded: list[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    rows_written: int = 0

    @property
    def cancelled(self) -> bool:
        return bool(self.skipped)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["cancelled"] = self.cancelled
        return d


@dataclass
class _SymbolOutcome:
    symbol: str
    status: str  # succeeded | failed | skipped
    rows_written: int = 0
    error: str = ""


class IndicatorBatchRunner:
    """Runs incremental recomputes for a list of symbols."""

    def __init__(
        self,
        store: IndicatorStore,
        service: IndicatorServiceInterface,
        config: Optional[Settings] = None,
    ):
        self._store = store
        self._service = service
        self._config = config or get_settings()

    async def run(
        self,
        symbols: Sequence[str],
        periods: Optional[Sequence[Period]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchReport:
        periods = list(periods) if periods else [Period(p) for p in self._config.batch_periods]
        semaphore = asyncio.Semaphore(max(1, self._config.batch_max_workers))

        logger.info(
            f"Batch start: {len(symbols)} symbols, periods {[p.value for p in periods]}, "
            f"{self._config.batch_max_workers} workers"
        )

        async def worker(symbol: str) -> _SymbolOutcome:
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    return _SymbolOutcome(symbol=symbol, status="skipped")
                return await self._run_symbol(symbol, periods)

        outcomes = await asyncio.gather(*(worker(s) for s in symbols))

        report = BatchReport()
        for outcome in outcomes:
            if outcome.status == "succeeded":
                report.succeeded.append(outcome.symbol)
                report.rows_written += outcome.rows_written
            elif outcome.status == "failed":
                report.failed[outcome.symbol] = outcome.error
            else:
                report.skipped.append(outcome.symbol)

        if report.skipped:
            logger.warning(f"Batch cancelled: {len(report.skipped)} symbols skipped")
        logger.info(
            f"Batch done: {len(report.succeeded)} ok, {len(report.failed)} failed, "
            f"{report.rows_written} rows written"
        )
        return report

    async def _run_symbol(self, symbol: str, periods: Sequence[Period]) -> _SymbolOutcome:
        written = 0
        try:
            for period in periods:
                written += await self._run_period(symbol, period)
        except Exception as e:
            logger.error(f"Error computing indicators for {symbol}: {e}")
            return _SymbolOutcome(symbol=symbol, status="failed", rows_written=written, error=str(e))

        logger.debug(f"{symbol}: {written} rows written")
        return _SymbolOutcome(symbol=symbol, status="succeeded", rows_written=written)

    async def _run_period(self, symbol: str, period: Period) -> int:
        bars = await self._store.get_bars(symbol, period)
        if not bars:
            logger.debug(f"No {period.value} bars for {symbol}")
            return 0

        prior_rows = await self._store.get_last_indicator_rows(
            symbol, period, n=self._config.incremental_tail_rows
        )
        result = await self._service.execute(
            IndicatorRequest(symbol=symbol, period=period, bars=bars, prior_rows=prior_rows)
        )
        return await self._store.upsert_indicator_rows(result.rows)
