"""
Logging bootstrap.

Modules log through ``logging.getLogger(__name__)``; this only configures
the root handler once per process.
"""

import logging
from typing import Optional

from stockta.core.config import Settings, get_settings


def setup_logging(config: Optional[Settings] = None) -> None:
    """Configure the root logger from settings."""
    config = config or get_settings()
    level = logging.DEBUG if config.debug else getattr(
        logging, config.log_level.upper(), logging.INFO
    )
    logging.basicConfig(level=level, format=config.log_format)
    logging.getLogger(__name__).debug(
        f"Logging configured for {config.app_name} ({config.environment})"
    )
