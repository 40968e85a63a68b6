"""Tests for the schema contracts."""

import pydantic
import pytest

from stockta.schemas.indicators import IndicatorRow
from stockta.schemas.market import Bar, DaySnapshot, Period, parse_trade_date
from stockta.schemas.signals import SignalCategory, SignalEvent, SignalSide, sort_events


def test_bar_code_strips_exchange():
    bar = Bar(symbol="000001.SZ", trade_date=20240102, open=1, high=1, low=1, close=1)
    assert bar.code == "000001"
    assert bar.year == 2024


def test_bar_rejects_impossible_date():
    with pytest.raises(pydantic.ValidationError):
        Bar(trade_date=20240231, open=1, high=1, low=1, close=1)


def test_bar_rejects_negative_price():
    with pytest.raises(pydantic.ValidationError):
        Bar(trade_date=20240102, open=-1, high=1, low=1, close=1)


def test_parse_trade_date():
    assert parse_trade_date(20240315).isoformat() == "2024-03-15"


def test_snapshot_from_bar():
    bar = Bar(trade_date=20240102, open=2, high=3, low=1, close=2.5)
    assert DaySnapshot.from_bar(bar) == DaySnapshot(open=2, high=3, low=1, close=2.5)


def test_indicator_row_key_and_frozen():
    row = IndicatorRow(symbol="X", trade_date=20240102, period=Period.MONTHLY)
    assert row.key == ("X", 20240102, Period.MONTHLY)
    with pytest.raises(pydantic.ValidationError):
        row.ma5 = 1.0


def test_every_category_has_a_side():
    for category in SignalCategory:
        assert isinstance(category.side, SignalSide)
    assert SignalCategory.STAR_BUY.side == SignalSide.BUY
    assert SignalCategory.ESCAPE.side == SignalSide.SELL
    assert SignalCategory.PREPARE_BUY.side == SignalSide.WARNING
    assert SignalCategory.OVERHEAT_WARNING.side == SignalSide.WARNING


def test_sort_events_by_date_then_category():
    events = [
        SignalEvent(trade_date=20240103, category=SignalCategory.RISE),
        SignalEvent(trade_date=20240102, category=SignalCategory.STAR_BUY),
        SignalEvent(trade_date=20240102, category=SignalCategory.MACD_GOLDEN_CROSS),
    ]
    ordered = sort_events(events)
    assert [e.category for e in ordered] == [
        SignalCategory.MACD_GOLDEN_CROSS,
        SignalCategory.STAR_BUY,
        SignalCategory.RISE,
    ]
