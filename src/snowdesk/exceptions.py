"""Exception types raised by snowdesk."""


class SnowDeskError(Exception):
    """Base class for snowdesk errors."""


class ForecastFetchError(SnowDeskError):
    """Forecast provider returned an error, a bad status or an invalid body."""


class SummaryError(SnowDeskError):
    """Text-generation provider failed or returned an unusable response."""
