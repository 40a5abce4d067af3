"""Generated daily snow reports via the Anthropic Messages API.

Summaries are cached once per location per UTC day through SummaryStore.
Failures raise SummaryError; showing an error is up to the caller.
"""

import logging
import os
from datetime import date
from typing import Optional

import requests

from snowdesk.cache.store import SummaryStore
from snowdesk.exceptions import SummaryError
from snowdesk.models import ForecastSnapshot, Location, value_at
from snowdesk.utils.units import (
    get_current_hour_index,
    get_day_label,
    get_weather_info,
    to_f,
    to_inches,
    to_mph,
)

logger = logging.getLogger(__name__)

MESSAGES_URL = "https://api.anthropic.com/v1/messages"
API_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
MAX_TOKENS = 1000

# Request timeout in seconds
REQUEST_TIMEOUT = 60

SYSTEM_PROMPT = """You are a mountain weather forecaster writing a brief daily snow report for skiers and snowboarders.
Write exactly 3 sentences. Be direct and actionable. Use skier-friendly language, not meteorologist language.
Sentence 1: Describe current or very recent conditions on the mountain right now.
Sentence 2: Identify the single best upcoming window for skiing in the next 7 days and why.
Sentence 3: Name one specific thing to watch out for (wind, rain mix, warming trend, icy conditions, etc).
Do not use bullet points. Do not use headers. Do not use markdown formatting of any kind. Plain prose only.
Never start with the resort name. Never say "I" or "we". Write in present/future tense only."""


def build_forecast_payload(
    location: Location,
    snapshot: ForecastSnapshot,
    today: Optional[date] = None,
) -> dict:
    """Extract the 7-day imperial-unit payload the prompt needs.

    Args:
        location: Location being summarized
        snapshot: Its current forecast
        today: Reference date for day labels

    Returns:
        Dict with location_name, region, summit_elevation_m,
        current_depth_in and next_7_days
    """
    hour_index = get_current_hour_index(snapshot.hourly.time, snapshot.timezone)
    daily = snapshot.daily

    next_7_days = []
    for i, day in enumerate(daily.time[:7]):
        code = daily.weathercode[i] if i < len(daily.weathercode) else None
        next_7_days.append({
            "date": get_day_label(day, today),
            "snowfall_in": to_inches(value_at(daily.snowfall_sum, i)),
            "rain_in": to_inches(value_at(daily.rain_sum, i)),
            "high_f": f"{to_f(value_at(daily.temperature_2m_max, i)):.0f}",
            "low_f": f"{to_f(value_at(daily.temperature_2m_min, i)):.0f}",
            "max_wind_mph": str(to_mph(value_at(daily.windspeed_10m_max, i))),
            "condition": get_weather_info(code)[0],
        })

    return {
        "location_name": location.name,
        "region": location.region,
        "summit_elevation_m": location.summit_elevation,
        "current_depth_in": to_inches(value_at(snapshot.hourly.snow_depth, hour_index)),
        "next_7_days": next_7_days,
    }


def format_user_message(payload: dict) -> str:
    lines = [
        f"Resort: {payload['location_name']}, {payload['region']}",
        f"Summit elevation: {payload['summit_elevation_m']:.0f}m",
        f"Current snow depth at summit: {payload['current_depth_in']}\"",
        "7-day forecast:",
    ]
    for d in payload["next_7_days"]:
        lines.append(
            f"{d['date']}: {d['snowfall_in']}\" snow, {d['rain_in']}\" rain, "
            f"High {d['high_f']}°F / Low {d['low_f']}°F, "
            f"Wind max {d['max_wind_mph']}mph, Conditions: {d['condition']}"
        )
    return "\n".join(lines)


def generate_summary(
    location: Location,
    snapshot: ForecastSnapshot,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
) -> str:
    """Generate a 3-sentence snow report for a location.

    Args:
        location: Location to summarize
        snapshot: Its current forecast
        api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY)
        model: Model name (defaults to SNOWDESK_SUMMARY_MODEL or DEFAULT_MODEL)

    Returns:
        Non-empty summary text

    Raises:
        SummaryError: Missing API key, request failure or unexpected response
    """
    api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise SummaryError("ANTHROPIC_API_KEY not configured")

    try:
        payload = build_forecast_payload(location, snapshot)
    except ValueError as e:
        raise SummaryError(f"Malformed forecast for {location.name}: {e}") from e

    body = {
        "model": model or os.environ.get("SNOWDESK_SUMMARY_MODEL", DEFAULT_MODEL),
        "max_tokens": MAX_TOKENS,
        "system": SYSTEM_PROMPT,
        "messages": [{"role": "user", "content": format_user_message(payload)}],
    }
    headers = {
        "content-type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": API_VERSION,
    }

    try:
        response = requests.post(MESSAGES_URL, json=body, headers=headers, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise SummaryError(f"Network error generating summary for {location.name}: {e}") from e

    if not response.ok:
        raise SummaryError(f"Summary API error for {location.name}: HTTP {response.status_code}")

    try:
        text = response.json()["content"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise SummaryError(f"Unexpected summary response shape for {location.name}") from e

    if not isinstance(text, str) or not text.strip():
        raise SummaryError(f"Empty summary for {location.name}")

    logger.debug(f"Generated summary for {location.name} ({len(text)} chars)")
    return text


def get_cached_or_fetch_summary(
    store: SummaryStore,
    location: Location,
    snapshot: ForecastSnapshot,
) -> str:
    """Today's summary for a location, generated at most once per UTC day."""
    return store.get_or_fetch(location.id, lambda: generate_summary(location, snapshot))
