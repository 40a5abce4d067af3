"""Shared pytest fixtures for snowdesk tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- live: Real API tests, slow, requires network

Run live tests with: pytest -m live --run-live
"""

import pytest

from snowdesk.models import ForecastSnapshot, Location


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live API tests (slow, requires network)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class FakeClock:
    """Settable epoch clock for cache and alert tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def alta() -> Location:
    return Location(
        id="alta",
        name="Alta",
        country="US",
        region="Utah",
        lat=40.5884,
        lon=-111.6386,
        summit_elevation=3216,
        base_elevation=2600,
        vertical_drop=616,
        tier=1,
    )


@pytest.fixture
def snowbird() -> Location:
    return Location(
        id="snowbird",
        name="Snowbird",
        country="US",
        region="Utah",
        lat=40.5830,
        lon=-111.6538,
        summit_elevation=3353,
        base_elevation=2365,
        vertical_drop=988,
        tier=1,
    )


@pytest.fixture
def sample_locations() -> list[Location]:
    """25 tier-1 locations plus 2 tier-2 locations."""
    tier1 = [
        Location(
            id=f"resort-{i:03d}",
            name=f"Resort {i}",
            country="US",
            region="Colorado",
            lat=39.0 + i * 0.01,
            lon=-106.0,
            summit_elevation=3500,
            tier=1,
        )
        for i in range(25)
    ]
    tier2 = [
        Location(
            id=f"resort-t2-{i}",
            name=f"Backcountry {i}",
            country="US",
            region="Montana",
            lat=45.0,
            lon=-111.0,
            summit_elevation=2500,
            tier=2,
        )
        for i in range(2)
    ]
    return tier1 + tier2


def make_snapshot(snowfall_sum=None, **daily) -> ForecastSnapshot:
    """Minimal snapshot with the given daily snowfall values."""
    daily_block = {"snowfall_sum": list(snowfall_sum or [])}
    daily_block.update(daily)
    if "time" not in daily_block:
        daily_block["time"] = [
            f"2026-01-{10 + i:02d}" for i in range(len(daily_block["snowfall_sum"]))
        ]
    return ForecastSnapshot.model_validate({
        "timezone": "America/Denver",
        "daily": daily_block,
        "hourly": {"time": [], "snowfall": []},
    })


@pytest.fixture
def snapshot_factory():
    return make_snapshot
