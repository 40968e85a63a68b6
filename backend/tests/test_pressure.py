"""Tests for the time-decay pressure composite."""

from datetime import date

import numpy as np

from stockta.services.signals.pressure import (
    GREEN_BAR_SCALE,
    MIN_BARS,
    calculate_pressure,
    time_gate,
)


def test_insufficient_history_boundary(rising_bars):
    assert MIN_BARS == 58
    assert calculate_pressure(rising_bars[:57]) is None
    assert calculate_pressure(rising_bars[:58]) is not None


def test_series_bounded_and_aligned(wave_bars):
    result = calculate_pressure(wave_bars)
    assert len(result.a) == len(wave_bars)
    assert len(result.a1) == len(wave_bars)
    assert np.isfinite(result.a).all()
    assert np.isfinite(result.a1).all()
    assert np.all(result.a <= 100)
    assert np.all(result.a1 <= 50)


def test_pressure_bars(wave_bars):
    result = calculate_pressure(wave_bars)
    assert len(result.red_bars) == int(np.sum(result.a > -150))
    for bar in result.green_bars:
        assert bar.value > 0
        assert bar.start == 0.0
        assert bar.end == GREEN_BAR_SCALE * bar.value


def test_time_gate():
    gate = time_gate(np.array([20371231, 20380101, 20400615]))
    assert list(gate) == [1.0, 0.0, 0.0]


def test_gate_zeroes_pipeline_from_2038(make_bars):
    closes = 20 + 2 * np.sin(np.arange(90) / 5)
    bars = make_bars(closes, start=date(2037, 11, 1), wick=0.1)
    result = calculate_pressure(bars)

    gated = result.trade_dates >= 20380101
    assert gated.any() and (~gated).any()
    assert np.all(result.as1[gated] == 0)
    assert np.all(result.as1[~gated] == 1)
    assert np.all(result.a[gated] == 0)
    assert np.all(result.a1[gated] == 0)
    assert not any(b.trade_date >= 20380101 for b in result.green_bars)
