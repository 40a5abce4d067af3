"""Best skiing day within the 7-day forecast horizon."""

from typing import Optional, Union

from snowdesk.models import BestWindow, DailyEntry, ForecastSnapshot, value_at

HORIZON_DAYS = 7

SNOW_WEIGHT = 3
RAIN_PENALTY = 5
WIND_LIMIT_KMH = 50
WIND_PENALTY = 10
COLD_BONUS = 5


def score_day(day: DailyEntry) -> float:
    """Score a single forecast day.

    score = snowfall*3 - rain*5 - (10 if max wind > 50 km/h) + (5 if max temp < 0C)

    Examples:
        >>> score_day(DailyEntry("2026-01-10", 20, 0, 20, -8))
        65.0
    """
    score = day.snowfall_sum * SNOW_WEIGHT - day.rain_sum * RAIN_PENALTY
    if day.windspeed_10m_max > WIND_LIMIT_KMH:
        score -= WIND_PENALTY
    if day.temperature_2m_max < 0:
        score += COLD_BONUS
    return float(score)


def get_best_window(
    daily_entries: list[Union[DailyEntry, dict]],
    horizon: int = HORIZON_DAYS,
) -> Optional[BestWindow]:
    """Find the highest scoring day in the first ``horizon`` days.

    Ties go to the earliest day. Returns None for an empty horizon.

    Args:
        daily_entries: DailyEntry objects or Open-Meteo style dicts
        horizon: Number of leading days to consider
    """
    best = None
    for i, raw in enumerate(daily_entries[:horizon]):
        day = raw if isinstance(raw, DailyEntry) else DailyEntry.from_mapping(raw)
        score = score_day(day)
        if best is None or score > best.score:
            best = BestWindow(day_index=i, date=day.date, score=score)
    return best


def daily_entries_from_snapshot(snapshot: ForecastSnapshot) -> list[DailyEntry]:
    """Build scoring entries from a snapshot's daily block, missing values as 0."""
    daily = snapshot.daily
    return [
        DailyEntry(
            date=date,
            snowfall_sum=value_at(daily.snowfall_sum, i),
            rain_sum=value_at(daily.rain_sum, i),
            windspeed_10m_max=value_at(daily.windspeed_10m_max, i),
            temperature_2m_max=value_at(daily.temperature_2m_max, i),
        )
        for i, date in enumerate(daily.time)
    ]


def get_best_window_for_snapshot(snapshot: ForecastSnapshot) -> Optional[BestWindow]:
    return get_best_window(daily_entries_from_snapshot(snapshot))
