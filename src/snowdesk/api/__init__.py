"""External provider clients: Open-Meteo forecasts and generated summaries."""

from snowdesk.api.open_meteo import fetch_forecast, fetch_historical
from snowdesk.api.summary import (
    build_forecast_payload,
    generate_summary,
    get_cached_or_fetch_summary,
)

__all__ = [
    "build_forecast_payload",
    "fetch_forecast",
    "fetch_historical",
    "generate_summary",
    "get_cached_or_fetch_summary",
]
