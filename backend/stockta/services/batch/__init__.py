"""
Batch Orchestration

Bounded-concurrency recompute over many symbols with per-symbol failure
isolation and cooperative cancellation.
"""

from stockta.services.batch.runner import BatchReport, IndicatorBatchRunner

__all__ = ["BatchReport", "IndicatorBatchRunner"]
