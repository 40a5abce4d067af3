"""Snow condition scoring: quality classification and best-day selection."""

from snowdesk.conditions.best_window import (
    daily_entries_from_snapshot,
    get_best_window,
    get_best_window_for_snapshot,
    score_day,
)
from snowdesk.conditions.snow_quality import (
    QUALITY_RULES,
    classify,
    current_quality,
    estimate_snow_age,
    quality_result,
)

__all__ = [
    "QUALITY_RULES",
    "classify",
    "current_quality",
    "daily_entries_from_snapshot",
    "estimate_snow_age",
    "get_best_window",
    "get_best_window_for_snapshot",
    "quality_result",
    "score_day",
]
