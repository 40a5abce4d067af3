"""Powder alert evaluation."""

from snowdesk.alerts.engine import (
    AlertEngine,
    LoggingNotifier,
    Notifier,
    build_notification_payload,
)

__all__ = [
    "AlertEngine",
    "LoggingNotifier",
    "Notifier",
    "build_notification_payload",
]
