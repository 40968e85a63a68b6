"""Tests for the in-memory indicator store."""

import asyncio

import pytest

from stockta.schemas.indicators import IndicatorRow
from stockta.schemas.market import Period
from stockta.services.base import StorageError
from stockta.services.storage import InMemoryIndicatorStore


@pytest.fixture
def store():
    return InMemoryIndicatorStore()


def test_get_bars_filters_and_limits(store, wave_bars):
    async def run():
        await store.add_bars("000001.SZ", wave_bars)
        everything = await store.get_bars("000001.SZ")
        window = await store.get_bars(
            "000001.SZ",
            start_date=wave_bars[10].trade_date,
            end_date=wave_bars[19].trade_date,
        )
        newest = await store.get_bars("000001.SZ", limit=5)
        other_period = await store.get_bars("000001.SZ", Period.WEEKLY)
        return everything, window, newest, other_period

    everything, window, newest, other_period = asyncio.run(run())
    assert everything == wave_bars
    assert window == wave_bars[10:20]
    assert newest == wave_bars[-5:]
    assert other_period == []


def test_add_bars_rejects_foreign_symbol(store, wave_bars):
    with pytest.raises(StorageError):
        asyncio.run(store.add_bars("600000.SH", wave_bars[:3]))


def test_upsert_is_idempotent(store):
    rows = [IndicatorRow(symbol="X", trade_date=20240101 + i, ma5=float(i)) for i in range(5)]

    async def run():
        await store.upsert_indicator_rows(rows)
        await store.upsert_indicator_rows(rows)
        return await store.get_indicator_rows("X")

    assert asyncio.run(run()) == rows


def test_upsert_replaces_by_key(store):
    async def run():
        await store.upsert_indicator_rows([IndicatorRow(symbol="X", trade_date=20240102, ma5=1.0)])
        await store.upsert_indicator_rows([IndicatorRow(symbol="X", trade_date=20240102, ma5=2.0)])
        await store.upsert_indicator_rows(
            [IndicatorRow(symbol="X", trade_date=20240102, period=Period.WEEKLY, ma5=3.0)]
        )
        return (
            await store.get_indicator_rows("X"),
            await store.get_indicator_rows("X", Period.WEEKLY),
        )

    daily, weekly = asyncio.run(run())
    assert [r.ma5 for r in daily] == [2.0]
    assert [r.ma5 for r in weekly] == [3.0]


def test_last_rows_are_newest_ascending(store):
    rows = [IndicatorRow(symbol="X", trade_date=20240101 + i) for i in range(5)]

    async def run():
        await store.upsert_indicator_rows(list(reversed(rows)))
        return await store.get_last_indicator_rows("X", n=2)

    assert asyncio.run(run()) == rows[-2:]
