"""
Storage Collaborators

CONTRACT:
    get_bars / get_last_indicator_rows / upsert_indicator_rows

The in-memory store backs tests and single-process batch runs; a
relational implementation only has to honor the same contract.
"""

from stockta.services.storage.interface import IndicatorStore
from stockta.services.storage.memory import InMemoryIndicatorStore

__all__ = ["IndicatorStore", "InMemoryIndicatorStore"]
