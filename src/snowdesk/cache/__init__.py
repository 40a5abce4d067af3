"""Forecast caching and bulk prefetch for snowdesk.

A load cycle can be run via:
    python -m snowdesk.cache.refresh --locations resorts.json
"""

from snowdesk.cache.refresh import BatchLoader, LoadResult
from snowdesk.cache.store import ForecastStore, SummaryStore

__all__ = [
    "BatchLoader",
    "ForecastStore",
    "LoadResult",
    "SummaryStore",
]
