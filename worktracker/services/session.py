"""Per-user tracking session: idle checks and clock refresh on APScheduler."""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from worktracker.config import settings
from worktracker.models.time_entry import TimeEntry
from worktracker.services.durations import has_missing_break_start, worked_milliseconds
from worktracker.services.feed import EntryFeed, entry_feed
from worktracker.services.idle_monitor import IdleHandler, IdleMonitor
from worktracker.utils.clock import Clock, system_clock

logger = logging.getLogger(__name__)

TickHandler = Callable[[datetime, int], None]


class TrackerSession:
    """
    Periodic jobs bound to one signed-in user.

    ``start`` subscribes to the user's entry feed and schedules the idle
    check and the clock refresh; ``stop`` removes both jobs and the feed
    subscription, after which no handler is called again.
    """

    def __init__(
        self,
        user_id: str,
        feed: EntryFeed,
        clock: Clock = system_clock,
        idle_minutes: int = settings.default_idle_minutes,
        on_idle: Optional[IdleHandler] = None,
        on_tick: Optional[TickHandler] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.user_id = user_id
        self.feed = feed
        self.clock = clock
        self.on_tick = on_tick
        self.monitor = IdleMonitor(idle_minutes, clock, on_idle=on_idle or self._log_idle)
        self.running_entry: Optional[TimeEntry] = None
        self.idle_since: Optional[datetime] = None
        self.elapsed_ms: Optional[int] = None
        self.last_tick: Optional[datetime] = None
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or AsyncIOScheduler()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._active = False

    @property
    def idle_job_id(self) -> str:
        return f"idle-check:{self.user_id}"

    @property
    def clock_job_id(self) -> str:
        return f"clock-refresh:{self.user_id}"

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return

        self._active = True
        self._unsubscribe = self.feed.subscribe(self.user_id, self.on_entries)
        latest = self.feed.latest(self.user_id)
        if latest is not None:
            self.on_entries(latest)

        self.scheduler.add_job(
            self.poll_idle,
            IntervalTrigger(seconds=settings.idle_check_interval_seconds),
            id=self.idle_job_id,
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.refresh_clock,
            IntervalTrigger(seconds=settings.clock_refresh_seconds),
            id=self.clock_job_id,
            replace_existing=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()

        logger.info("Tracking session started for user %s", self.user_id)

    def stop(self) -> None:
        if not self._active:
            return

        self._active = False
        for job_id in (self.idle_job_id, self.clock_job_id):
            if self.scheduler.get_job(job_id) is not None:
                self.scheduler.remove_job(job_id)

        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        logger.info("Tracking session stopped for user %s", self.user_id)

    def on_entries(self, entries: list[TimeEntry]) -> None:
        """Feed listener: re-bind the monitor to whichever entry is running."""
        running = next((entry for entry in entries if entry.is_running), None)
        if running is not None and has_missing_break_start(running):
            logger.warning(
                "Entry %s is on break without a break start", running.id,
                extra={"user_id": self.user_id, "entry_id": running.id},
            )

        if running is None or self.running_entry is None or running.id != self.running_entry.id:
            self.idle_since = None
        self.running_entry = running
        if running is None:
            self.elapsed_ms = None
            self.last_tick = None
        self.monitor.bind(running)

    def record_activity(self, at: Optional[datetime] = None) -> None:
        self.monitor.record_activity(at)
        self.idle_since = None

    def set_idle_minutes(self, idle_minutes: int) -> None:
        self.monitor.set_idle_minutes(idle_minutes)

    def poll_idle(self) -> bool:
        if not self._active:
            return False
        return self.monitor.poll()

    def refresh_clock(self) -> Optional[int]:
        """
        Elapsed worked milliseconds of the running entry, pushed to ``on_tick``.

        The latest value is kept on ``elapsed_ms`` for status reads.
        """
        if not self._active or self.running_entry is None:
            return None

        now = self.clock.now()
        elapsed = worked_milliseconds(self.running_entry, now)
        self.elapsed_ms = elapsed
        self.last_tick = now
        if self.on_tick is not None:
            self.on_tick(now, elapsed)
        return elapsed

    def _log_idle(self, entry: TimeEntry, idle_for: timedelta) -> None:
        self.idle_since = self.monitor.last_activity
        logger.warning(
            "User %s idle for %d minutes on entry %s",
            self.user_id,
            idle_for // timedelta(minutes=1),
            entry.id,
            extra={"user_id": self.user_id, "entry_id": entry.id},
        )


class SessionRegistry:
    """Tracks one session per signed-in user, sharing a single scheduler."""

    def __init__(self, feed: EntryFeed, clock: Clock = system_clock):
        self.feed = feed
        self.clock = clock
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._sessions: dict[str, TrackerSession] = {}

    def _scheduler(self) -> AsyncIOScheduler:
        if self.scheduler is None:
            self.scheduler = AsyncIOScheduler()
        return self.scheduler

    def get(self, user_id: str) -> Optional[TrackerSession]:
        return self._sessions.get(user_id)

    def get_or_start(self, user_id: str, idle_minutes: int) -> TrackerSession:
        session = self._sessions.get(user_id)
        if session is None:
            session = TrackerSession(
                user_id,
                self.feed,
                clock=self.clock,
                idle_minutes=idle_minutes,
                scheduler=self._scheduler(),
            )
            self._sessions[user_id] = session
            session.start()
        else:
            session.set_idle_minutes(idle_minutes)
        return session

    def stop(self, user_id: str) -> bool:
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        session.stop()
        return True

    def stop_all(self) -> None:
        for user_id in list(self._sessions):
            self.stop(user_id)
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None


# Global session registry
session_registry = SessionRegistry(entry_feed)


def get_session_registry() -> SessionRegistry:
    """Dependency to get the session registry."""
    return session_registry
