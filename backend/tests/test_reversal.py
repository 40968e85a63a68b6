"""Tests for the reversal-triangle composite."""

import numpy as np

from stockta.schemas.signals import SignalCategory, SignalSide
from stockta.services.signals.reversal import MIN_BARS, calculate_reversal


def test_insufficient_history_boundary(rising_bars):
    assert MIN_BARS == 33
    assert calculate_reversal(rising_bars[:32]) is None
    assert calculate_reversal(rising_bars[:33]) is not None


def test_series_align_with_bars(wave_bars):
    result = calculate_reversal(wave_bars)
    for name in ("var1", "var2", "var3", "var4", "var5", "trend", "buy_line", "big_bottom"):
        series = getattr(result, name)
        assert len(series) == len(wave_bars), name
        assert np.isfinite(series).all(), name
    assert np.all(result.base_line == 1.0)
    assert result.var1[0] == 0.0


def test_triangle_buy_when_trend_leaves_base(rising_bars):
    result = calculate_reversal(rising_bars)
    # the first bar has a zero-width range, the second closes at its high
    assert result.trend[0] == 0.0
    assert result.dates(SignalCategory.TRIANGLE_BUY)[0] == rising_bars[1].trade_date
    assert result.buy_line[1] == 100.0


def test_big_bottom_on_sharp_drop(make_bars):
    closes = [20.0] * 30 + [18.0, 16.0, 14.0, 12.0, 10.0]
    bars = make_bars(closes)
    result = calculate_reversal(bars)
    assert bars[34].trade_date in result.dates(SignalCategory.BIG_BOTTOM)
    assert result.big_bottom[34] == 100.0


def test_no_buy_on_falling_prices(falling_bars):
    result = calculate_reversal(falling_bars)
    assert [e for e in result.events if e.side == SignalSide.BUY] == []
