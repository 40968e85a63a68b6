import logging

from stockta.core.config import Settings, get_settings
from stockta.core.logging import setup_logging


def test_defaults():
    config = Settings()
    assert config.incremental_tail_rows == 2
    assert config.full_recompute_keep_rows is None
    assert (config.macd_fast, config.macd_slow, config.macd_signal) == (12, 26, 9)
    assert (config.kdj_n, config.kdj_m1, config.kdj_m2) == (9, 3, 3)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BATCH_MAX_WORKERS", "8")
    monkeypatch.setenv("BATCH_PERIODS", '["daily", "weekly"]')
    monkeypatch.setenv("FULL_RECOMPUTE_KEEP_ROWS", "60")

    config = Settings()
    assert config.batch_max_workers == 8
    assert config.batch_periods == ["daily", "weekly"]
    assert config.full_recompute_keep_rows == 60


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_setup_logging_announces_configuration(caplog):
    caplog.set_level(logging.DEBUG, logger="stockta.core.logging")
    setup_logging(Settings(app_name="ladder-engine", debug=True))
    assert any("ladder-engine" in record.getMessage() for record in caplog.records)
