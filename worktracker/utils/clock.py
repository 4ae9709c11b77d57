"""Clock sources for the engine.

Every computation that depends on "now" receives it from a clock object
instead of calling ``datetime.now()`` itself, so tests can replay exact
instants.
"""
from datetime import datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    """Anything that can report the current instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Host wall clock in local time (naive datetimes)."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """
    Manually driven clock.

    Example:
        >>> clock = FixedClock(datetime(2024, 3, 4, 9, 0))
        >>> clock.advance(minutes=30)
        >>> clock.now()
        datetime.datetime(2024, 3, 4, 9, 30)
    """

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1)

    def now(self) -> datetime:
        return self._now

    def set(self, instant: datetime) -> None:
        self._now = instant

    def advance(self, **delta) -> None:
        self._now = self._now + timedelta(**delta)


system_clock = SystemClock()


def get_clock() -> Clock:
    """Dependency to get the clock used by request handlers."""
    return system_clock
