"""Open-Meteo forecast and archive client.

Data Sources:
- Forecast: https://api.open-meteo.com/v1/forecast
- Archive: https://archive-api.open-meteo.com/v1/archive

Forecasts are requested at the summit elevation so that temperatures and
snowfall reflect conditions on the upper mountain.
"""

import logging
from datetime import date, timedelta
from typing import Optional

import requests
from pydantic import ValidationError

from snowdesk.exceptions import ForecastFetchError
from snowdesk.models import ForecastSnapshot, Location

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"

# Request timeout in seconds
REQUEST_TIMEOUT = 30

FORECAST_DAYS = 16
HISTORY_DAYS = 10

HOURLY_VARS = [
    "snowfall",              # cm/hr
    "snow_depth",            # cm
    "temperature_2m",        # C
    "apparent_temperature",  # C
    "precipitation",         # mm
    "rain",                  # mm
    "weathercode",           # WMO 0-99
    "windspeed_10m",         # km/h
    "windgusts_10m",         # km/h
    "winddirection_10m",     # degrees
    "cloudcover",            # %
    "relativehumidity_2m",   # %
]

DAILY_VARS = [
    "snowfall_sum",
    "rain_sum",
    "precipitation_sum",
    "temperature_2m_max",
    "temperature_2m_min",
    "windspeed_10m_max",
    "windgusts_10m_max",
    "precipitation_hours",
    "weathercode",
]


def build_forecast_params(location: Location) -> dict:
    """Query parameters for a 16-day hourly + daily forecast."""
    return {
        "latitude": location.lat,
        "longitude": location.lon,
        "elevation": location.summit_elevation,
        "timezone": "auto",
        "forecast_days": FORECAST_DAYS,
        "hourly": ",".join(HOURLY_VARS),
        "daily": ",".join(DAILY_VARS),
    }


def _get_json(url: str, params: dict, what: str, location: Location) -> dict:
    try:
        response = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise ForecastFetchError(
            f"Network error fetching {what} for {location.name}: {e}"
        ) from e

    if not response.ok:
        raise ForecastFetchError(
            f"HTTP {response.status_code} fetching {what} for {location.name}"
        )

    try:
        body = response.json()
    except ValueError as e:
        raise ForecastFetchError(
            f"Invalid JSON in {what} for {location.name}: {e}"
        ) from e

    if not isinstance(body, dict):
        raise ForecastFetchError(f"Unexpected {what} body for {location.name}")
    return body


def fetch_forecast(location: Location) -> ForecastSnapshot:
    """Fetch the current forecast for a location.

    Args:
        location: Location to forecast

    Returns:
        Parsed ForecastSnapshot

    Raises:
        ForecastFetchError: On network failure, non-2xx status or a body
            that does not match the forecast shape.
    """
    body = _get_json(FORECAST_URL, build_forecast_params(location), "forecast", location)

    try:
        snapshot = ForecastSnapshot.model_validate(body)
    except ValidationError as e:
        raise ForecastFetchError(
            f"Malformed forecast for {location.name}: {e.error_count()} errors"
        ) from e

    logger.debug(
        f"Fetched forecast for {location.name} "
        f"({len(snapshot.hourly.time)} hours, {len(snapshot.daily.time)} days)"
    )
    return snapshot


def fetch_historical(location: Location, today: Optional[date] = None) -> dict:
    """Fetch the last 10 days of daily snowfall and temperatures.

    The window runs from ``today - 10 days`` to yesterday.

    Returns:
        Raw archive response
    """
    if today is None:
        today = date.today()

    params = {
        "latitude": location.lat,
        "longitude": location.lon,
        "elevation": location.summit_elevation,
        "start_date": (today - timedelta(days=HISTORY_DAYS)).isoformat(),
        "end_date": (today - timedelta(days=1)).isoformat(),
        "daily": "snowfall_sum,temperature_2m_max,temperature_2m_min",
        "timezone": "auto",
    }
    return _get_json(ARCHIVE_URL, params, "historical data", location)
