"""Tests for powder alert evaluation."""

from unittest.mock import Mock

import pytest

from snowdesk.alerts.engine import (
    AlertEngine,
    LoggingNotifier,
    Notifier,
    build_notification_payload,
)

HOUR = 60 * 60


class RecordingNotifier(Notifier):
    """Notifier that records payloads instead of delivering them."""

    def __init__(self, granted=True):
        self.granted = granted
        self.payloads = []

    def permission_granted(self):
        return self.granted

    def notify(self, payload):
        self.payloads.append(payload)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def engine(notifier, clock):
    return AlertEngine(notifier, clock=clock)


class TestBuildNotificationPayload:
    def test_payload_shape(self, alta):
        payload = build_notification_payload(alta, "7.9")

        assert payload == {
            "title": "❄️ Powder Alert: Alta",
            "body": '7.9" forecast in the next 48 hours — Utah',
            "icon": "/snow-icon.png",
        }


class TestEvaluate:
    """Tests for AlertEngine.evaluate()."""

    def test_fires_when_threshold_met(self, engine, notifier, clock, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([20, 0])}

        log = engine.evaluate([alta], forecasts, {}, 15.24, {})

        assert len(notifier.payloads) == 1
        assert notifier.payloads[0]["body"].startswith('7.9"')
        assert log["alta"] == clock.now

    def test_uses_max_of_first_two_days(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([2, 18, 40])}

        engine.evaluate([alta], forecasts, {}, 15.24, {})

        assert notifier.payloads[0]["body"].startswith('7.1"')

    def test_ignores_day_three(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([2, 3, 40])}

        log = engine.evaluate([alta], forecasts, {}, 15.24, {})

        assert notifier.payloads == []
        assert log == {}

    def test_below_threshold(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([10, 12])}

        log = engine.evaluate([alta], forecasts, {}, 15.24, {})

        assert notifier.payloads == []
        assert "alta" not in log

    def test_threshold_is_inclusive(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([15.24, 0])}

        engine.evaluate([alta], forecasts, {}, 15.24, {})

        assert len(notifier.payloads) == 1

    def test_cooldown_blocks_refire(self, engine, notifier, clock, alta, snapshot_factory):
        """Fired one second ago: no alert, log entry unchanged."""
        forecasts = {"alta": snapshot_factory([20, 0])}
        last_fired = clock.now - 1

        log = engine.evaluate([alta], forecasts, {}, 15.24, {"alta": last_fired})

        assert notifier.payloads == []
        assert log["alta"] == last_fired

    def test_fires_after_cooldown(self, engine, notifier, clock, alta, snapshot_factory):
        """Fired seven hours ago: alert fires, log entry moves to now."""
        forecasts = {"alta": snapshot_factory([20, 0])}

        log = engine.evaluate([alta], forecasts, {}, 15.24, {"alta": clock.now - 7 * HOUR})

        assert len(notifier.payloads) == 1
        assert log["alta"] == pytest.approx(clock.now)

    def test_exactly_six_hours_still_cooling_down(self, engine, notifier, clock, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([20, 0])}

        engine.evaluate([alta], forecasts, {}, 15.24, {"alta": clock.now - 6 * HOUR})

        assert notifier.payloads == []

    def test_repeat_evaluation_does_not_duplicate(self, engine, notifier, clock, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([20, 0])}

        log = engine.evaluate([alta], forecasts, {}, 15.24, {})
        clock.advance(HOUR)
        engine.evaluate([alta], forecasts, {}, 15.24, log)

        assert len(notifier.payloads) == 1

    def test_per_location_override(self, engine, notifier, alta, snapshot_factory):
        """An override above the forecast suppresses the alert."""
        forecasts = {"alta": snapshot_factory([20, 0])}

        log = engine.evaluate([alta], forecasts, {"alta": 25.4}, 15.24, {})

        assert notifier.payloads == []
        assert log == {}

    def test_override_can_lower_threshold(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([6, 0])}

        engine.evaluate([alta], forecasts, {"alta": 5.0}, 15.24, {})

        assert len(notifier.payloads) == 1

    def test_default_threshold_when_none(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([15, 0])}

        engine.evaluate([alta], forecasts, None, None, None)

        assert notifier.payloads == []

    def test_missing_forecast_skipped(self, engine, notifier, alta, snowbird, snapshot_factory):
        forecasts = {"snowbird": snapshot_factory([30, 0])}

        log = engine.evaluate([alta, snowbird], forecasts, {}, 15.24, {})

        assert list(log) == ["snowbird"]
        assert len(notifier.payloads) == 1

    def test_empty_snowfall_skipped(self, engine, notifier, alta, snapshot_factory):
        log = engine.evaluate([alta], {"alta": snapshot_factory([])}, {}, 15.24, {})

        assert notifier.payloads == []
        assert log == {}

    def test_single_day_forecast(self, engine, notifier, alta, snapshot_factory):
        engine.evaluate([alta], {"alta": snapshot_factory([16])}, {}, 15.24, {})

        assert len(notifier.payloads) == 1

    def test_null_snowfall_reads_as_zero(self, engine, notifier, alta, snapshot_factory):
        forecasts = {"alta": snapshot_factory([None, 20])}

        engine.evaluate([alta], forecasts, {}, 15.24, {})

        assert len(notifier.payloads) == 1

    def test_preserves_unrelated_entries(self, engine, clock, alta, snapshot_factory):
        """Entries for locations outside the evaluation set survive."""
        forecasts = {"alta": snapshot_factory([20, 0])}
        prior = {"far-away": 12345.0, "alta": 0}

        log = engine.evaluate([alta], forecasts, {}, 15.24, prior)

        assert log["far-away"] == 12345.0
        assert log["alta"] == clock.now
        assert prior["alta"] == 0

    def test_permission_denied_returns_log_unchanged(self, clock, alta, snapshot_factory):
        notifier = RecordingNotifier(granted=False)
        engine = AlertEngine(notifier, clock=clock)
        prior = {"alta": 1.0}

        log = engine.evaluate([alta], {"alta": snapshot_factory([50, 0])}, {}, 15.24, prior)

        assert log == prior
        assert log is not prior
        assert notifier.payloads == []

    def test_base_notifier_is_not_permitted(self, clock, alta, snapshot_factory):
        engine = AlertEngine(Notifier(), clock=clock)

        log = engine.evaluate([alta], {"alta": snapshot_factory([50, 0])}, {}, 15.24, {})

        assert log == {}

    def test_callback_invoked(self, engine, alta, snapshot_factory):
        callback = Mock()

        engine.evaluate([alta], {"alta": snapshot_factory([20, 0])}, {}, 15.24, {}, callback)

        callback.assert_called_once_with(alta, "7.9")

    def test_callback_failure_keeps_log_update(self, engine, clock, alta, snapshot_factory):
        callback = Mock(side_effect=RuntimeError("ui gone"))

        log = engine.evaluate([alta], {"alta": snapshot_factory([20, 0])}, {}, 15.24, {}, callback)

        assert log["alta"] == clock.now

    def test_notify_failure_still_records(self, clock, alta, snapshot_factory):
        notifier = RecordingNotifier()
        notifier.notify = Mock(side_effect=OSError("no display"))
        engine = AlertEngine(notifier, clock=clock)

        log = engine.evaluate([alta], {"alta": snapshot_factory([20, 0])}, {}, 15.24, {})

        assert log["alta"] == clock.now

    def test_bad_location_does_not_stop_pass(self, engine, notifier, snowbird, snapshot_factory):
        """A malformed entry is logged and the rest are still evaluated."""
        forecasts = {"snowbird": snapshot_factory([30, 0])}

        log = engine.evaluate([object(), snowbird], forecasts, {}, 15.24, {})

        assert "snowbird" in log
        assert len(notifier.payloads) == 1

    def test_evaluates_locations_independently(self, engine, notifier, clock, alta, snowbird, snapshot_factory):
        forecasts = {
            "alta": snapshot_factory([20, 0]),
            "snowbird": snapshot_factory([20, 0]),
        }
        prior = {"alta": clock.now - HOUR}

        log = engine.evaluate([alta, snowbird], forecasts, {}, 15.24, prior)

        assert log["alta"] == prior["alta"]
        assert log["snowbird"] == clock.now
        assert [p["title"] for p in notifier.payloads] == ["❄️ Powder Alert: Snowbird"]


class TestLoggingNotifier:
    def test_logs_payload(self, alta, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level("INFO", logger="snowdesk.alerts.engine"):
            notifier.notify(build_notification_payload(alta, "7.9"))

        assert notifier.permission_granted()
        assert "Powder Alert: Alta" in caplog.text
