"""Powder alerts: threshold-and-cooldown notifications per location.

The engine never touches persistent storage. It takes the previous
last-fired log and returns a merged copy; the caller persists it.
"""

import logging
import time
from typing import Callable, Optional

from snowdesk.config import ALERT_COOLDOWN_SECONDS
from snowdesk.models import ForecastSnapshot, Location, value_at
from snowdesk.utils.units import CM_TO_INCHES, POWDER_THRESHOLD_CM

logger = logging.getLogger(__name__)

NOTIFICATION_ICON = "/snow-icon.png"

# Days of daily snowfall considered (next 48 hours)
ALERT_WINDOW_DAYS = 2


def build_notification_payload(location: Location, snowfall_in: str) -> dict[str, str]:
    """Format the notification for one location.

    Args:
        location: Location that crossed its threshold
        snowfall_in: Forecast snowfall in inches, already formatted (e.g. "7.9")

    Returns:
        Dict with title, body and icon

    Examples:
        >>> alta = Location("alta", "Alta", "US", "Utah", 40.59, -111.64, 3216)
        >>> build_notification_payload(alta, "7.9")["title"]
        '❄️ Powder Alert: Alta'
    """
    return {
        "title": f"❄️ Powder Alert: {location.name}",
        "body": f'{snowfall_in}" forecast in the next 48 hours — {location.region}',
        "icon": NOTIFICATION_ICON,
    }


class Notifier:
    """Notification surface. Subclasses deliver payloads somewhere visible."""

    def permission_granted(self) -> bool:
        return False

    def notify(self, payload: dict[str, str]) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Delivers notifications to the log. Always permitted."""

    def permission_granted(self) -> bool:
        return True

    def notify(self, payload: dict[str, str]) -> None:
        logger.info(f"{payload['title']} - {payload['body']}")


class AlertEngine:
    """Evaluates powder alerts across locations.

    A location fires when its max daily snowfall over the next two days is at
    or above its threshold and its last alert is more than 6 hours old.

    Usage:
        engine = AlertEngine(LoggingNotifier())
        alert_log = engine.evaluate(locations, forecasts, {}, 15.24, alert_log)
    """

    def __init__(
        self,
        notifier: Notifier,
        cooldown_seconds: float = ALERT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.notifier = notifier
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock

    def evaluate(
        self,
        locations: list[Location],
        forecasts: dict[str, ForecastSnapshot],
        thresholds: Optional[dict[str, float]],
        default_threshold: Optional[float],
        alert_log: Optional[dict[str, float]],
        on_alert_fired: Optional[Callable[[Location, str], None]] = None,
    ) -> dict[str, float]:
        """Check every location and fire due alerts.

        Args:
            locations: Locations to evaluate
            forecasts: Cached snapshots by location id; missing ones are skipped
            thresholds: Per-location overrides in cm
            default_threshold: Global threshold in cm (15.24 if None)
            alert_log: Last-fired epoch seconds by location id
            on_alert_fired: Optional callback(location, snowfall_in) per alert

        Returns:
            Copy of ``alert_log`` with fired locations set to now. Entries are
            never removed. Unchanged when notification permission is missing.
        """
        updated_log = dict(alert_log or {})

        if not self.notifier.permission_granted():
            logger.debug("Notification permission not granted, skipping alerts")
            return updated_log

        thresholds = thresholds or {}
        if default_threshold is None:
            default_threshold = POWDER_THRESHOLD_CM

        for location in locations or []:
            try:
                self._evaluate_location(
                    location,
                    forecasts or {},
                    thresholds,
                    default_threshold,
                    updated_log,
                    on_alert_fired,
                )
            except Exception as e:
                logger.error(f"Alert check failed for {getattr(location, 'id', location)}: {e}")

        return updated_log

    def _evaluate_location(
        self,
        location: Location,
        forecasts: dict[str, ForecastSnapshot],
        thresholds: dict[str, float],
        default_threshold: float,
        updated_log: dict[str, float],
        on_alert_fired: Optional[Callable[[Location, str], None]],
    ) -> None:
        forecast = forecasts.get(location.id)
        if forecast is None:
            return

        override = thresholds.get(location.id)
        threshold = override if override is not None else default_threshold

        snowfall = forecast.daily.snowfall_sum[:ALERT_WINDOW_DAYS]
        if not snowfall:
            return

        max_snow = max(value_at(snowfall, i) for i in range(len(snowfall)))
        last_fired = updated_log.get(location.id) or 0
        now = self._clock()

        if max_snow < threshold or now - last_fired <= self.cooldown_seconds:
            return

        snowfall_in = f"{max_snow * CM_TO_INCHES:.1f}"
        payload = build_notification_payload(location, snowfall_in)

        try:
            self.notifier.notify(payload)
        except Exception as e:
            logger.error(f"Notification failed for {location.name}: {e}")

        updated_log[location.id] = now
        logger.info(f"Powder alert fired for {location.name} ({max_snow:.1f}cm >= {threshold}cm)")

        if on_alert_fired is not None:
            try:
                on_alert_fired(location, snowfall_in)
            except Exception as e:
                logger.error(f"Alert callback failed for {location.name}: {e}")
