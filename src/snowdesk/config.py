"""Configuration constants and loaders for saved state.

The core only reads persisted state. Writing the updated alert log back is
left to the caller (see ``snowdesk.cache.refresh.main``).
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from snowdesk.models import Location
from snowdesk.utils.units import POWDER_THRESHOLD_CM

logger = logging.getLogger(__name__)

# Forecast cache freshness window
FORECAST_TTL_SECONDS = 60 * 60

# Bulk prefetch pacing
BATCH_SIZE = 10
BATCH_DELAY_SECONDS = 0.2

# Minimum time between two alerts for the same location
ALERT_COOLDOWN_SECONDS = 6 * 60 * 60


class AlertSettings(BaseModel):
    """Saved powder-alert thresholds.

    Attributes:
        default_threshold: Global threshold in cm (default 6 inches)
        thresholds: Per-location overrides in cm, keyed by location id
    """

    default_threshold: float = Field(default=POWDER_THRESHOLD_CM, ge=0)
    thresholds: dict[str, float] = Field(default_factory=dict)

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    def threshold_for(self, location_id: str) -> float:
        """Per-location override if set, otherwise the default."""
        override = self.thresholds.get(location_id)
        return override if override is not None else self.default_threshold


def load_locations(path: Path, tier: Optional[int] = None) -> list[Location]:
    """Load location records from a JSON array file.

    Args:
        path: JSON file containing a list of location objects
        tier: If given, keep only locations of this tier

    Returns:
        List of Location records in file order
    """
    with open(path) as f:
        records = json.load(f)

    locations = [Location.from_dict(record) for record in records]
    if tier is not None:
        locations = [loc for loc in locations if loc.tier == tier]

    logger.debug(f"Loaded {len(locations)} locations from {path}")
    return locations


def load_alert_settings(path: Optional[Path]) -> AlertSettings:
    """Load alert thresholds, falling back to defaults when no file exists.

    Accepts ``defaultThreshold`` as written by the dashboard client.
    """
    if path is None or not Path(path).exists():
        return AlertSettings()

    with open(path) as f:
        raw = json.load(f)

    if "defaultThreshold" in raw and "default_threshold" not in raw:
        raw["default_threshold"] = raw.pop("defaultThreshold")
    return AlertSettings.model_validate(raw)


def load_alert_log(path: Optional[Path]) -> dict[str, float]:
    """Load the last-fired alert log. Missing or unreadable files are empty."""
    if path is None or not Path(path).exists():
        return {}

    try:
        with open(path) as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring unreadable alert log {path}: {e}")
        return {}

    if not isinstance(raw, dict):
        return {}
    return {str(k): float(v) for k, v in raw.items() if v is not None}


def save_alert_log(path: Path, alert_log: dict[str, float]) -> None:
    """Write the merged alert log as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(alert_log, f, indent=2, sort_keys=True)
