"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "StockTA Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    # Batch orchestration
    batch_max_workers: int = 4
    batch_periods: list[str] = ["yearly", "monthly", "weekly", "daily"]

    # Incremental recompute
    incremental_tail_rows: int = 2
    full_recompute_keep_rows: Optional[int] = None  # None keeps every row

    # MACD
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9

    # KDJ
    kdj_n: int = 9
    kdj_m1: int = 3
    kdj_m2: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
