"""Bulk forecast prefetch for tier-1 locations.

Loads forecasts in batches of 10 concurrent fetches, pausing 200ms between
batches so the upstream API never sees more than one batch at a time.
A failed location is marked ``error`` and logged; the cycle carries on.

Usage:
    python -m snowdesk.cache.refresh --locations data/resorts.json
    python -m snowdesk.cache.refresh --locations data/resorts.json \\
        --settings data/alert_settings.json --alert-log data/alert_log.json
"""

import argparse
import logging
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from snowdesk.alerts.engine import AlertEngine, LoggingNotifier
from snowdesk.api.open_meteo import fetch_forecast
from snowdesk.cache.store import ForecastStore
from snowdesk.conditions.best_window import get_best_window_for_snapshot
from snowdesk.conditions.snow_quality import current_quality
from snowdesk.config import (
    BATCH_DELAY_SECONDS,
    BATCH_SIZE,
    load_alert_log,
    load_alert_settings,
    load_locations,
    save_alert_log,
)
from snowdesk.models import ForecastSnapshot, Location, LoadStatus
from snowdesk.utils.units import get_current_hour_index

logger = logging.getLogger(__name__)

OnItem = Callable[[str, ForecastSnapshot], None]
OnStatus = Callable[[str, LoadStatus], None]


@dataclass
class LoadResult:
    """Result of a load cycle."""

    total: int
    success: int
    failed: int
    skipped: int
    duration_ms: int
    batch_sizes: list[int] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Percentage of successful loads."""
        if self.total == 0:
            return 0.0
        return (self.success / self.total) * 100

    def __str__(self) -> str:
        return (
            f"Load complete: {self.success}/{self.total} successful, "
            f"{self.failed} failed, {self.skipped} skipped "
            f"in {len(self.batch_sizes)} batches ({self.duration_ms}ms)"
        )


def _noop(*args) -> None:
    return None


class BatchLoader:
    """Loads forecasts through a ForecastStore, tracking per-location status.

    Usage:
        loader = BatchLoader(ForecastStore())
        forecasts = {}
        loader.load_tier1(locations, forecasts.__setitem__)
    """

    def __init__(
        self,
        store: Optional[ForecastStore] = None,
        fetch_fn: Optional[Callable[[Location], ForecastSnapshot]] = None,
        batch_size: int = BATCH_SIZE,
        batch_delay: float = BATCH_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize loader.

        Args:
            store: Forecast cache shared with the rest of the app
            fetch_fn: Fetches a forecast for one location
            batch_size: Concurrent fetches per batch
            batch_delay: Seconds to pause between batches
            sleep: Pause primitive, replaceable in tests
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        self.store = store if store is not None else ForecastStore()
        self.fetch_fn = fetch_fn or fetch_forecast
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep
        self._statuses: dict[str, LoadStatus] = {}
        self._lock = threading.Lock()

    def status(self, location_id: str) -> LoadStatus:
        """Current load status of a location (``idle`` if never loaded)."""
        with self._lock:
            return self._statuses.get(location_id, LoadStatus.IDLE)

    def statuses(self) -> dict[str, LoadStatus]:
        with self._lock:
            return dict(self._statuses)

    def _emit(self, on_status: OnStatus, location_id: str, status: LoadStatus) -> None:
        try:
            on_status(location_id, status)
        except Exception as e:
            logger.error(f"Status callback failed for {location_id}: {e}")

    def _set_status(self, location_id: str, status: LoadStatus, on_status: OnStatus) -> None:
        with self._lock:
            self._statuses[location_id] = status
        self._emit(on_status, location_id, status)

    def _begin(self, location: Location, on_status: OnStatus) -> bool:
        with self._lock:
            if self._statuses.get(location.id) == LoadStatus.LOADING:
                return False
            self._statuses[location.id] = LoadStatus.LOADING
        self._emit(on_status, location.id, LoadStatus.LOADING)
        return True

    def load_one(
        self,
        location: Location,
        on_item: OnItem = _noop,
        on_status: OnStatus = _noop,
    ) -> LoadStatus:
        """Load a single location's forecast. Never raises.

        Used by ``load_all`` and directly for on-demand (tier-2) locations.

        Returns:
            Final status: ``done`` or ``error``, or ``loading`` when another
            load for the same location is already in flight.
        """
        if not self._begin(location, on_status):
            logger.debug(f"{location.name}: already loading, skipped")
            return LoadStatus.LOADING

        try:
            data = self.store.get_or_fetch(location.id, lambda: self.fetch_fn(location))
        except Exception as e:
            logger.error(f"Failed to load forecast for {location.name}: {e}")
            self._set_status(location.id, LoadStatus.ERROR, on_status)
            return LoadStatus.ERROR

        try:
            on_item(location.id, data)
        except Exception as e:
            logger.error(f"Forecast callback failed for {location.name}: {e}")
            self._set_status(location.id, LoadStatus.ERROR, on_status)
            return LoadStatus.ERROR

        self._set_status(location.id, LoadStatus.DONE, on_status)
        return LoadStatus.DONE

    def load_all(
        self,
        locations: list[Location],
        on_item: OnItem = _noop,
        on_status: OnStatus = _noop,
    ) -> LoadResult:
        """Load every location in fixed-size concurrent batches. Never raises.

        Args:
            locations: Locations to load, in order
            on_item: Called with (location_id, snapshot) per successful load
            on_status: Called with (location_id, status) on each transition

        Returns:
            LoadResult with counts and the size of each batch
        """
        start_time = time.time()
        total = len(locations)
        batch_sizes = []
        outcomes: list[LoadStatus] = []

        logger.info(f"Starting forecast load for {total} locations...")

        for i in range(0, total, self.batch_size):
            batch = locations[i:i + self.batch_size]
            batch_sizes.append(len(batch))

            with ThreadPoolExecutor(max_workers=len(batch)) as executor:
                futures = [
                    executor.submit(self.load_one, location, on_item, on_status)
                    for location in batch
                ]
                outcomes.extend(future.result() for future in futures)

            logger.debug(f"Batch {len(batch_sizes)} complete ({len(batch)} locations)")

            if i + self.batch_size < total:
                self._sleep(self.batch_delay)

        result = LoadResult(
            total=total,
            success=sum(1 for s in outcomes if s == LoadStatus.DONE),
            failed=sum(1 for s in outcomes if s == LoadStatus.ERROR),
            skipped=sum(1 for s in outcomes if s == LoadStatus.LOADING),
            duration_ms=int((time.time() - start_time) * 1000),
            batch_sizes=batch_sizes,
        )

        logger.info(str(result))
        return result

    def load_tier1(
        self,
        locations: list[Location],
        on_item: OnItem = _noop,
        on_status: OnStatus = _noop,
    ) -> LoadResult:
        """Load only the tier-1 locations from a full location list."""
        return self.load_all([loc for loc in locations if loc.tier == 1], on_item, on_status)


def print_status(
    locations: list[Location],
    loader: BatchLoader,
    forecasts: dict[str, ForecastSnapshot],
) -> None:
    """Print per-location load status, current quality and best day."""
    print()
    print("=" * 72)
    print("SnowDesk Forecast Status")
    print("=" * 72)

    now = datetime.now(tz=timezone.utc)
    for location in locations:
        status = loader.status(location.id).value
        snapshot = forecasts.get(location.id)

        if snapshot is None:
            print(f"  {location.name:<28} {status:<8}")
            continue

        hour_index = get_current_hour_index(snapshot.hourly.time, snapshot.timezone, now)
        quality = current_quality(snapshot, hour_index)
        best = get_best_window_for_snapshot(snapshot)
        best_text = f"{best.date} ({best.score:.0f})" if best else "N/A"

        print(
            f"  {location.name:<28} {status:<8} "
            f"{quality.emoji} {quality.label:<14} best: {best_text}"
        )

    print("=" * 72)


def main():
    """CLI entry point for a load-and-alert cycle."""
    parser = argparse.ArgumentParser(
        description="Prefetch tier-1 forecasts and check powder alerts",
        epilog="""
Examples:
  python -m snowdesk.cache.refresh --locations resorts.json
  python -m snowdesk.cache.refresh --locations resorts.json --alert-log alerts.json
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--locations",
        type=Path,
        required=True,
        help="JSON file with the location list",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="JSON file with alert thresholds",
    )
    parser.add_argument(
        "--alert-log",
        type=Path,
        default=None,
        help="JSON file with the last-fired alert log (read and updated)",
    )
    parser.add_argument(
        "--all-tiers",
        action="store_true",
        help="Load every location, not just tier 1",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )

    args = parser.parse_args()

    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        locations = load_locations(args.locations)
        settings = load_alert_settings(args.settings)
        alert_log = load_alert_log(args.alert_log)
    except Exception as e:
        logger.error(f"Failed to read configuration: {e}")
        return 1

    targets = locations if args.all_tiers else [loc for loc in locations if loc.tier == 1]

    forecasts: dict[str, ForecastSnapshot] = {}
    loader = BatchLoader()
    result = loader.load_all(targets, forecasts.__setitem__)

    engine = AlertEngine(LoggingNotifier())
    updated_log = engine.evaluate(
        targets,
        forecasts,
        settings.thresholds,
        settings.default_threshold,
        alert_log,
    )

    if args.alert_log is not None:
        save_alert_log(args.alert_log, updated_log)

    if not args.quiet:
        print_status(targets, loader, forecasts)

    return 1 if result.failed > 0 else 0


if __name__ == "__main__":
    sys.exit(main())
