# tests/conftest.py
"""
Configuration for pytest.

Bar fixtures share one construction: each bar opens at the previous close,
high/low wrap open and close, volume is constant unless given.
"""

from datetime import date, timedelta

import numpy as np
import pytest

from stockta.core.config import Settings
from stockta.schemas.market import Bar

SYMBOL = "000001.SZ"


def trade_dates(count, start=date(2024, 1, 2)):
    """Consecutive calendar days as YYYYMMDD integers."""
    days = [start + timedelta(days=i) for i in range(count)]
    return [d.year * 10000 + d.month * 100 + d.day for d in days]


def build_bars(closes, start=date(2024, 1, 2), symbol=SYMBOL, volume=1_000_000, wick=0.0):
    bars = []
    previous = None
    for trade_date, close in zip(trade_dates(len(closes), start), closes):
        close = float(close)
        open_ = close if previous is None else previous
        bars.append(
            Bar(
                symbol=symbol,
                trade_date=trade_date,
                open=open_,
                high=max(open_, close) + wick,
                low=min(open_, close) - wick,
                close=close,
                volume=volume,
                amount=close * volume,
            )
        )
        previous = close
    return bars


def build_ohlc_bars(rows, start=date(2024, 1, 2), symbol=SYMBOL, volume=1_000_000):
    """Bars from explicit (open, high, low, close) tuples."""
    return [
        Bar(
            symbol=symbol,
            trade_date=trade_date,
            open=open_,
            high=high,
            low=low,
            close=close,
            volume=volume,
            amount=close * volume,
        )
        for trade_date, (open_, high, low, close) in zip(trade_dates(len(rows), start), rows)
    ]


@pytest.fixture
def make_bars():
    """Factory building bars from a close series."""
    return build_bars


@pytest.fixture
def make_ohlc_bars():
    """Factory building bars from (open, high, low, close) tuples."""
    return build_ohlc_bars


@pytest.fixture
def rising_bars():
    """60 bars with closes rising linearly from 10.00 to 13.00."""
    return build_bars(np.linspace(10.0, 13.0, 60))


@pytest.fixture
def falling_bars():
    """60 bars with closes falling linearly from 13.00 to 10.00."""
    return build_bars(np.linspace(13.0, 10.0, 60))


@pytest.fixture
def wave_bars():
    """120 bars of a noisy oscillating series, deterministic."""
    rng = np.random.default_rng(7)
    i = np.arange(120)
    closes = 20 + 3 * np.sin(i / 6) + 1.5 * np.sin(i / 17) + rng.normal(0, 0.3, 120)
    volumes = rng.integers(500_000, 2_000_000, 120)
    bars = build_bars(np.round(closes, 2), wick=0.15)
    return [b.model_copy(update={"volume": int(v)}) for b, v in zip(bars, volumes)]


@pytest.fixture
def settings():
    return Settings(batch_periods=["daily"], batch_max_workers=2)
