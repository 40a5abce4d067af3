"""Shared utilities for snowdesk."""

from .units import (
    CM_TO_INCHES,
    KMH_TO_MPH,
    POWDER_THRESHOLD_CM,
    degrees_to_cardinal,
    get_current_hour_index,
    get_day_label,
    get_weather_info,
    round_half_up,
    to_f,
    to_inches,
    to_miles,
    to_mph,
)

__all__ = [
    "CM_TO_INCHES",
    "KMH_TO_MPH",
    "POWDER_THRESHOLD_CM",
    "degrees_to_cardinal",
    "get_current_hour_index",
    "get_day_label",
    "get_weather_info",
    "round_half_up",
    "to_f",
    "to_inches",
    "to_miles",
    "to_mph",
]
