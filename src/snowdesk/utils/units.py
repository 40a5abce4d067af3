"""Unit conversions and display helpers for forecast data."""

import logging
import math
from bisect import bisect_right
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

CM_TO_INCHES = 0.3937
POWDER_THRESHOLD_CM = 15.24  # 6 inches
KMH_TO_MPH = 0.6214
METERS_PER_MILE = 1609.34

# WMO weather codes used by Open-Meteo
WEATHER_CODES = {
    0: ("Clear", "☀️"),
    1: ("Mostly Clear", "🌤️"),
    2: ("Partly Cloudy", "⛅"),
    3: ("Overcast", "☁️"),
    51: ("Light Drizzle", "🌦️"),
    61: ("Light Rain", "🌧️"),
    71: ("Light Snow", "🌨️"),
    73: ("Moderate Snow", "❄️"),
    75: ("Heavy Snow", "❄️❄️"),
    77: ("Snow Grains", "🌨️"),
    85: ("Snow Showers", "🌨️"),
    86: ("Heavy Snow Showers", "❄️❄️"),
}

CARDINALS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to `digits` places with halves always going up.

    Examples:
        >>> round_half_up(2.5)
        3.0
        >>> round_half_up(0.25, 1)
        0.3
    """
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def to_f(celsius: float) -> float:
    """Celsius to Fahrenheit."""
    return celsius * 9 / 5 + 32


def to_inches(cm: float) -> float:
    """Centimeters to inches, rounded to 1 decimal place.

    Examples:
        >>> to_inches(15.24)
        6.0
    """
    return round_half_up(cm * CM_TO_INCHES, 1)


def to_mph(kmh: float) -> int:
    """km/h to mph, rounded to whole mph."""
    return int(round_half_up(kmh * KMH_TO_MPH))


def to_miles(meters: float) -> float:
    """Meters to miles, rounded to 1 decimal place."""
    return round_half_up(meters / METERS_PER_MILE, 1)


def get_weather_info(code: Optional[int]) -> tuple[str, str]:
    """Return (label, icon) for a WMO weather code.

    Unmapped or missing codes fall back to ("Unknown", "❓").
    """
    return WEATHER_CODES.get(code, ("Unknown", "❓"))


def degrees_to_cardinal(degrees: float) -> str:
    """Wind direction in degrees to an 8-point cardinal direction.

    Examples:
        >>> degrees_to_cardinal(0)
        'N'
        >>> degrees_to_cardinal(225)
        'SW'
        >>> degrees_to_cardinal(-45)
        'NW'
    """
    normalized = ((degrees % 360) + 360) % 360
    return CARDINALS[int(normalized / 45 + 0.5) % 8]


def get_day_label(date_str: str, today: Optional[date] = None) -> str:
    """Label a YYYY-MM-DD date as "Today", "Tomorrow" or a short weekday.

    Args:
        date_str: ISO date string
        today: Reference date (defaults to the local date)

    Returns:
        "Today", "Tomorrow", or e.g. "Mon"
    """
    if today is None:
        today = date.today()

    day = date.fromisoformat(date_str[:10])
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return day.strftime("%a")


def get_current_hour_index(
    times: list[str],
    timezone: str,
    now: Optional[datetime] = None,
) -> int:
    """Find the index of the current local hour in an Open-Meteo time array.

    Open-Meteo hourly times look like "2026-02-27T14:00" and are local to
    the response timezone. Returns the exact hour when present, otherwise
    the closest earlier hour, and 0 on empty input or any lookup failure.

    Args:
        times: Ascending hourly time strings
        timezone: IANA timezone of the forecast (e.g. "America/Denver")
        now: Aware reference time (defaults to the current time)
    """
    if not times:
        return 0

    try:
        if now is None:
            now = datetime.now(tz=ZoneInfo("UTC"))
        local = now.astimezone(ZoneInfo(timezone))
        local_hour = local.strftime("%Y-%m-%dT%H:00")

        if local_hour in times:
            return times.index(local_hour)

        # Strings of this format sort chronologically
        return max(0, bisect_right(times, local_hour) - 1)
    except Exception as e:
        logger.debug(f"Hour index lookup failed for {timezone}: {e}")
        return 0
