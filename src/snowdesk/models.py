"""Data models for the forecast core.

Locations are read-only reference data. Forecast snapshots mirror the
Open-Meteo response shape; every array is optional so that a partial
response never breaks the pure computations downstream.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


@dataclass(frozen=True)
class Location:
    """Ski area reference data.

    Attributes:
        id: Stable location identifier (cache and alert-log key)
        name: Display name
        country: Country code
        region: State/province/region name
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        summit_elevation: Summit elevation in meters
        base_elevation: Base elevation in meters
        vertical_drop: Summit minus base in meters
        tier: 1 = prefetched in bulk, 2 = fetched on demand
    """

    id: str
    name: str
    country: str
    region: str
    lat: float
    lon: float
    summit_elevation: float
    base_elevation: float = 0.0
    vertical_drop: float = 0.0
    tier: int = 2

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        """Build a Location from a dataset record.

        Accepts both snake_case keys and the camelCase keys used by the
        location dataset (``lng``, ``summitElevation``, ...).
        """
        summit = data.get("summit_elevation", data.get("summitElevation", 0))
        base = data.get("base_elevation", data.get("baseElevation", 0))
        vertical = data.get("vertical_drop", data.get("verticalDrop"))
        if vertical is None:
            vertical = (summit or 0) - (base or 0)

        return cls(
            id=str(data["id"]),
            name=data["name"],
            country=data.get("country", ""),
            region=data.get("region", ""),
            lat=float(data["lat"]),
            lon=float(data.get("lon", data.get("lng", 0.0))),
            summit_elevation=float(summit or 0),
            base_elevation=float(base or 0),
            vertical_drop=float(vertical),
            tier=int(data.get("tier", 2)),
        )


class HourlyForecast(BaseModel):
    """Hourly block of an Open-Meteo forecast (parallel arrays)."""

    time: list[str] = Field(default_factory=list)
    snowfall: list[Optional[float]] = Field(default_factory=list)
    snow_depth: list[Optional[float]] = Field(default_factory=list)
    temperature_2m: list[Optional[float]] = Field(default_factory=list)
    apparent_temperature: list[Optional[float]] = Field(default_factory=list)
    precipitation: list[Optional[float]] = Field(default_factory=list)
    rain: list[Optional[float]] = Field(default_factory=list)
    weathercode: list[Optional[int]] = Field(default_factory=list)
    windspeed_10m: list[Optional[float]] = Field(default_factory=list)
    windgusts_10m: list[Optional[float]] = Field(default_factory=list)
    winddirection_10m: list[Optional[float]] = Field(default_factory=list)
    cloudcover: list[Optional[float]] = Field(default_factory=list)
    relativehumidity_2m: list[Optional[float]] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class DailyForecast(BaseModel):
    """Daily block of an Open-Meteo forecast (parallel arrays)."""

    time: list[str] = Field(default_factory=list)
    snowfall_sum: list[Optional[float]] = Field(default_factory=list)
    rain_sum: list[Optional[float]] = Field(default_factory=list)
    precipitation_sum: list[Optional[float]] = Field(default_factory=list)
    temperature_2m_max: list[Optional[float]] = Field(default_factory=list)
    temperature_2m_min: list[Optional[float]] = Field(default_factory=list)
    windspeed_10m_max: list[Optional[float]] = Field(default_factory=list)
    windgusts_10m_max: list[Optional[float]] = Field(default_factory=list)
    precipitation_hours: list[Optional[float]] = Field(default_factory=list)
    weathercode: list[Optional[int]] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ForecastSnapshot(BaseModel):
    """One fetched forecast for one location. Immutable once fetched."""

    timezone: str = "UTC"
    hourly: HourlyForecast = Field(default_factory=HourlyForecast)
    daily: DailyForecast = Field(default_factory=DailyForecast)

    model_config = {"extra": "ignore", "frozen": True}


def value_at(series: Optional[list], index: int) -> float:
    """Read a numeric series entry, treating anything missing as 0.

    Examples:
        >>> value_at([1.5, None], 1)
        0.0
        >>> value_at([], 3)
        0.0
    """
    if not series or index < 0 or index >= len(series):
        return 0.0
    value = series[index]
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class LoadStatus(Enum):
    """Per-location forecast load state."""

    IDLE = "idle"
    LOADING = "loading"
    DONE = "done"
    ERROR = "error"


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the epoch time (seconds) it was fetched."""

    value: T
    fetched_at: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.fetched_at < ttl_seconds


class SnowQuality(Enum):
    """Snow condition categories, valued by priority (1 = best)."""

    POWDER = 1
    WIND_AFFECTED = 2
    PACKED_POWDER = 3
    SOFT = 4
    SPRING_CORN = 5
    ICY = 6
    VARIABLE = 7


@dataclass(frozen=True)
class QualityResult:
    """Classified snow quality plus badge presentation metadata."""

    quality: SnowQuality
    label: str
    color: str
    bg_color: str
    emoji: str

    @property
    def priority(self) -> int:
        return self.quality.value


@dataclass(frozen=True)
class BestWindow:
    """Highest scoring day in the forecast horizon."""

    day_index: int
    date: str
    score: float


@dataclass
class DailyEntry:
    """Inputs to the best-window score for a single day."""

    date: str
    snowfall_sum: float = 0.0
    rain_sum: float = 0.0
    windspeed_10m_max: float = 0.0
    temperature_2m_max: float = 0.0

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "DailyEntry":
        def num(key: str) -> float:
            value = data.get(key)
            return float(value) if value is not None else 0.0

        return cls(
            date=str(data.get("time", data.get("date", ""))),
            snowfall_sum=num("snowfall_sum"),
            rain_sum=num("rain_sum"),
            windspeed_10m_max=num("windspeed_10m_max"),
            temperature_2m_max=num("temperature_2m_max"),
        )
