"""Errors raised by the time-accounting engine and services."""


class TrackerError(ValueError):
    """Base class for recoverable tracker errors."""


class ValidationError(TrackerError):
    """Input rejected before any state change (bad timestamps, empty fields)."""


class InvalidStateError(TrackerError):
    """Transition attempted from a state that forbids it."""


class MissingBreakStartError(InvalidStateError):
    """Entry is on break but carries no break start instant."""


class NotFoundError(TrackerError):
    """Requested document does not exist for this user."""
