"""Idle detection for a running timer."""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from worktracker.exceptions import ValidationError
from worktracker.models.time_entry import EntryStatus, TimeEntry
from worktracker.utils.clock import Clock

logger = logging.getLogger(__name__)

IdleHandler = Callable[[TimeEntry, timedelta], None]


class IdleMonitor:
    """
    Raises at most one idle signal per idle period.

    The monitor is bound to one entry at a time and only fires while that
    entry is active. ``poll`` is meant to be called from a periodic job;
    ``record_activity`` re-arms it.
    """

    def __init__(
        self,
        idle_minutes: int,
        clock: Clock,
        on_idle: Optional[IdleHandler] = None,
    ):
        self._clock = clock
        self._on_idle = on_idle
        self.idle_minutes = self._validate(idle_minutes)
        self.last_activity: datetime = clock.now()
        self.signal_raised = False
        self.entry: Optional[TimeEntry] = None

    @staticmethod
    def _validate(idle_minutes: int) -> int:
        if idle_minutes < 1:
            raise ValidationError("Idle reminder must be at least 1 minute.")
        return int(idle_minutes)

    @property
    def threshold(self) -> timedelta:
        return timedelta(minutes=self.idle_minutes)

    def set_idle_minutes(self, idle_minutes: int) -> None:
        self.idle_minutes = self._validate(idle_minutes)

    def bind(self, entry: Optional[TimeEntry]) -> None:
        """
        Watch ``entry``; leaving the active state clears a raised signal.

        A newly running entry, or one returning from a break, starts a fresh
        idle period.
        """
        previous = self.entry
        self.entry = entry
        if entry is None or entry.status != EntryStatus.ACTIVE:
            self.signal_raised = False
            return

        if (
            previous is None
            or previous.id != entry.id
            or previous.status != EntryStatus.ACTIVE
        ):
            self.record_activity()

    def record_activity(self, at: Optional[datetime] = None) -> None:
        self.last_activity = at or self._clock.now()
        self.signal_raised = False

    def poll(self) -> bool:
        """
        Check for idleness once.

        Returns:
            True if this call raised the idle signal
        """
        if self.entry is None or self.entry.status != EntryStatus.ACTIVE:
            return False
        if self.signal_raised:
            return False

        idle_for = self._clock.now() - self.last_activity
        if idle_for < self.threshold:
            return False

        self.signal_raised = True
        logger.info(
            "No activity for %s minutes on entry %s",
            self.idle_minutes,
            self.entry.id,
        )
        if self._on_idle is not None:
            self._on_idle(self.entry, idle_for)
        return True
