"""Snow quality classification for skiing conditions.

This module provides:
- Snow age estimation (hours since the last measurable snowfall)
- Quality classification into seven categories, ranked 1 (best) to 7
- Badge metadata (label, colors, emoji) for each category

Classification is an ordered rule list; the first matching rule wins.
The predicates overlap (fresh cold snow satisfies both Powder and Packed
Powder), so reordering the rules changes results.
"""

from typing import Callable, Optional

from snowdesk.models import ForecastSnapshot, QualityResult, SnowQuality, value_at

# Hourly snowfall (cm) that counts as "it snowed"
SNOWFALL_THRESHOLD_CM = 0.1

# Snow age saturates here; older snow is simply "stale"
MAX_SNOW_AGE_HOURS = 72

# (label, color, background color, emoji)
QUALITY_BADGES = {
    SnowQuality.POWDER: ("Powder", "#1E90FF", "#E8F4FD", "❄️"),
    SnowQuality.WIND_AFFECTED: ("Wind Affected", "#F97316", "#FEF3C7", "💨"),
    SnowQuality.PACKED_POWDER: ("Packed Powder", "#38BDF8", "#F0F9FF", "🎿"),
    SnowQuality.SOFT: ("Soft", "#4ADE80", "#F0FDF4", "✨"),
    SnowQuality.SPRING_CORN: ("Spring/Corn", "#FBBF24", "#FFFBEB", "☀️"),
    SnowQuality.ICY: ("Icy", "#EF4444", "#FEF2F2", "🧊"),
    SnowQuality.VARIABLE: ("Variable", "#9CA3AF", "#F9FAFB", "🌫️"),
}

# Predicate args: (temp_c, wind_kmh, snowfall_cm, snow_age_hours, humidity_pct)
Rule = tuple[Callable[[float, float, float, float, float], bool], SnowQuality]

QUALITY_RULES: tuple[Rule, ...] = (
    # Active snowfall, cold, manageable wind
    (lambda t, w, s, age, h: s > 0.5 and t < -2 and w < 40, SnowQuality.POWDER),
    # Fresh snow but blowing
    (lambda t, w, s, age, h: s > 0.2 and w >= 40, SnowQuality.WIND_AFFECTED),
    # Recent snow, cold and dry
    (lambda t, w, s, age, h: age <= 12 and t < -5 and h < 70, SnowQuality.PACKED_POWDER),
    # Recent snow, warming
    (lambda t, w, s, age, h: age <= 24 and -5 <= t < 2, SnowQuality.SOFT),
    (lambda t, w, s, age, h: t >= 2, SnowQuality.SPRING_CORN),
    # Old snow, refrozen
    (lambda t, w, s, age, h: age > 24 and t < -2, SnowQuality.ICY),
)


def quality_result(quality: SnowQuality) -> QualityResult:
    """Build the QualityResult (with badge metadata) for a category."""
    label, color, bg_color, emoji = QUALITY_BADGES[quality]
    return QualityResult(
        quality=quality,
        label=label,
        color=color,
        bg_color=bg_color,
        emoji=emoji,
    )


def _num(value: Optional[float]) -> float:
    return float(value) if value is not None else 0.0


def classify(
    temp_c: float,
    wind_kmh: float,
    snowfall_cm: float,
    snow_age_hours: float,
    humidity_pct: float,
) -> QualityResult:
    """Classify snow quality for the current hour.

    Rules, in order (first match wins):
    1. Powder: snowfall > 0.5cm, temp < -2C, wind < 40 km/h
    2. Wind Affected: snowfall > 0.2cm, wind >= 40 km/h
    3. Packed Powder: snow age <= 12h, temp < -5C, humidity < 70%
    4. Soft: snow age <= 24h, -5C <= temp < 2C
    5. Spring/Corn: temp >= 2C
    6. Icy: snow age > 24h, temp < -2C
    7. Variable: anything else

    Missing (None) inputs are treated as 0. NaN never matches a rule and
    falls through to Variable.

    Examples:
        >>> classify(-8, 10, 1.0, 0, 50).label
        'Powder'
        >>> classify(5, 10, 0, 48, 50).priority
        5
    """
    signals = (
        _num(temp_c),
        _num(wind_kmh),
        _num(snowfall_cm),
        _num(snow_age_hours),
        _num(humidity_pct),
    )

    for predicate, quality in QUALITY_RULES:
        if predicate(*signals):
            return quality_result(quality)
    return quality_result(SnowQuality.VARIABLE)


def estimate_snow_age(hourly_snowfall: list[Optional[float]], current_index: int) -> int:
    """Hours since hourly snowfall last exceeded 0.1cm, capped at 72.

    Scans backward from ``current_index``. Returns 0 if it is snowing in the
    current hour and 72 when nothing qualifies within the last 72 hours or
    the series runs out first.

    Examples:
        >>> estimate_snow_age([0, 0, 0.2], 2)
        0
        >>> estimate_snow_age([0.5, 0, 0], 2)
        2
        >>> estimate_snow_age([0] * 100, 80)
        72
    """
    if not hourly_snowfall or current_index < 0:
        return MAX_SNOW_AGE_HOURS

    current_index = min(current_index, len(hourly_snowfall) - 1)

    for hours_back in range(0, MAX_SNOW_AGE_HOURS + 1):
        i = current_index - hours_back
        if i < 0:
            break
        if value_at(hourly_snowfall, i) > SNOWFALL_THRESHOLD_CM:
            return hours_back

    return MAX_SNOW_AGE_HOURS


def current_quality(snapshot: ForecastSnapshot, hour_index: int) -> QualityResult:
    """Classify the snapshot's conditions at a given hour.

    Args:
        snapshot: Forecast snapshot
        hour_index: Index into the hourly arrays (see get_current_hour_index)
    """
    hourly = snapshot.hourly
    return classify(
        temp_c=value_at(hourly.temperature_2m, hour_index),
        wind_kmh=value_at(hourly.windspeed_10m, hour_index),
        snowfall_cm=value_at(hourly.snowfall, hour_index),
        snow_age_hours=estimate_snow_age(hourly.snowfall, hour_index),
        humidity_pct=value_at(hourly.relativehumidity_2m, hour_index),
    )
