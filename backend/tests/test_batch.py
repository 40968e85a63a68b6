"""Tests for the batch indicator runner."""

import asyncio

from stockta.core.config import Settings
from stockta.schemas.market import Period
from stockta.services.base import StorageError
from stockta.services.batch import IndicatorBatchRunner
from stockta.services.engine import IndicatorService
from stockta.services.storage import InMemoryIndicatorStore

SYMBOLS = ["000001.SZ", "000002.SZ", "600000.SH"]


class FailingStore(InMemoryIndicatorStore):
    """Store whose bar reads fail for one symbol."""

    def __init__(self, failing_symbol):
        super().__init__()
        self.failing_symbol = failing_symbol

    async def get_bars(self, symbol, period=Period.DAILY, start_date=None, end_date=None, limit=None):
        if symbol == self.failing_symbol:
            raise StorageError(self.name, f"read failed for {symbol}")
        return await super().get_bars(symbol, period, start_date, end_date, limit)


class CancellingService(IndicatorService):
    """Sets the cancel event once the first symbol is computed."""

    def __init__(self, cancel_event, **kwargs):
        super().__init__(**kwargs)
        self.cancel_event = cancel_event

    async def execute(self, input_data):
        result = await super().execute(input_data)
        self.cancel_event.set()
        return result


async def _load(store, make_bars, count=70):
    for n, symbol in enumerate(SYMBOLS):
        closes = [10.0 + n + 0.1 * ((i * 7) % 11) for i in range(count)]
        await store.add_bars(symbol, make_bars(closes, symbol=symbol))


def test_batch_computes_every_symbol(settings, make_bars):
    store = InMemoryIndicatorStore()

    async def run():
        await _load(store, make_bars)
        runner = IndicatorBatchRunner(store, IndicatorService(config=settings), settings)
        report = await runner.run(SYMBOLS)
        rows = {s: await store.get_indicator_rows(s) for s in SYMBOLS}
        return report, rows

    report, rows = asyncio.run(run())
    assert report.succeeded == SYMBOLS
    assert report.failed == {}
    assert not report.cancelled
    assert report.rows_written == 3 * 70
    assert all(len(r) == 70 for r in rows.values())


def test_failing_symbol_is_isolated(settings, make_bars):
    store = FailingStore("000002.SZ")

    async def run():
        await _load(store, make_bars)
        runner = IndicatorBatchRunner(store, IndicatorService(config=settings), settings)
        return await runner.run(SYMBOLS)

    report = asyncio.run(run())
    assert report.succeeded == ["000001.SZ", "600000.SH"]
    assert list(report.failed) == ["000002.SZ"]
    assert "read failed" in report.failed["000002.SZ"]


def test_rerun_is_idempotent(settings, make_bars):
    store = InMemoryIndicatorStore()

    async def run():
        await _load(store, make_bars)
        runner = IndicatorBatchRunner(store, IndicatorService(config=settings), settings)
        await runner.run(SYMBOLS)
        before = {s: await store.get_indicator_rows(s) for s in SYMBOLS}
        second = await runner.run(SYMBOLS)
        after = {s: await store.get_indicator_rows(s) for s in SYMBOLS}
        return before, second, after

    before, second, after = asyncio.run(run())
    assert after == before
    # only the newest persisted row is re-derived per symbol
    assert second.rows_written == len(SYMBOLS)


def test_new_bars_extend_rows_incrementally(settings, make_bars):
    store = InMemoryIndicatorStore()
    service = IndicatorService(config=settings)

    async def run():
        bars = make_bars([10.0 + 0.05 * i for i in range(80)], symbol="000001.SZ")
        await store.add_bars("000001.SZ", bars[:70])
        runner = IndicatorBatchRunner(store, service, settings)
        await runner.run(["000001.SZ"])
        await store.add_bars("000001.SZ", bars[70:])
        report = await runner.run(["000001.SZ"])
        return bars, report, await store.get_indicator_rows("000001.SZ")

    bars, report, rows = asyncio.run(run())
    assert report.rows_written == 11
    assert rows == service.compute(bars).rows


def test_cancelled_before_start(settings, make_bars):
    store = InMemoryIndicatorStore()

    async def run():
        await _load(store, make_bars)
        event = asyncio.Event()
        event.set()
        runner = IndicatorBatchRunner(store, IndicatorService(config=settings), settings)
        return await runner.run(SYMBOLS, cancel_event=event)

    report = asyncio.run(run())
    assert report.cancelled
    assert report.skipped == SYMBOLS
    assert report.rows_written == 0


def test_cancel_checked_between_symbols(make_bars):
    settings = Settings(batch_periods=["daily"], batch_max_workers=1)
    store = InMemoryIndicatorStore()

    async def run():
        await _load(store, make_bars)
        event = asyncio.Event()
        service = CancellingService(event, config=settings)
        runner = IndicatorBatchRunner(store, service, settings)
        return await runner.run(SYMBOLS, cancel_event=event)

    report = asyncio.run(run())
    assert report.succeeded == ["000001.SZ"]
    assert report.skipped == ["000002.SZ", "600000.SH"]


def test_explicit_periods(settings, make_bars):
    store = InMemoryIndicatorStore()

    async def run():
        await _load(store, make_bars)
        runner = IndicatorBatchRunner(store, IndicatorService(config=settings), settings)
        report = await runner.run(SYMBOLS[:1], periods=[Period.WEEKLY])
        return report, await store.get_indicator_rows(SYMBOLS[0], Period.DAILY)

    report, daily_rows = asyncio.run(run())
    # no weekly bars were loaded
    assert report.succeeded == SYMBOLS[:1]
    assert report.rows_written == 0
    assert daily_rows == []


def test_report_to_dict(settings):
    async def run():
        runner = IndicatorBatchRunner(InMemoryIndicatorStore(), IndicatorService(config=settings), settings)
        return await runner.run([])

    data = asyncio.run(run()).to_dict()
    assert data == {
        "succeeded": [], "failed": {}, "skipped": [], "rows_written": 0, "cancelled": False,
    }
