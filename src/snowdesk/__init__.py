"""Forecast intelligence for a ski-conditions dashboard.

- cache: time-boxed forecast cache, daily summary cache, batched prefetch
- conditions: snow quality classification and best-day scoring
- alerts: threshold-and-cooldown powder alerts
- api: Open-Meteo and summary-generation clients
"""

from snowdesk.alerts import AlertEngine, LoggingNotifier, Notifier
from snowdesk.cache import BatchLoader, ForecastStore, LoadResult, SummaryStore
from snowdesk.conditions import classify, estimate_snow_age, get_best_window
from snowdesk.models import (
    BestWindow,
    ForecastSnapshot,
    LoadStatus,
    Location,
    QualityResult,
    SnowQuality,
)

__version__ = "0.1.0"

__all__ = [
    "AlertEngine",
    "BatchLoader",
    "BestWindow",
    "ForecastSnapshot",
    "ForecastStore",
    "LoadResult",
    "LoadStatus",
    "Location",
    "LoggingNotifier",
    "Notifier",
    "QualityResult",
    "SnowQuality",
    "SummaryStore",
    "classify",
    "estimate_snow_age",
    "get_best_window",
]
