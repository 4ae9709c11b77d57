"""Worked-time arithmetic for time entries."""
from datetime import datetime, timedelta
from typing import Iterable

from worktracker.models.time_entry import EntryStatus, TimeEntry

MILLISECOND = timedelta(milliseconds=1)
MS_PER_MINUTE = 60_000


def whole_minutes(delta: timedelta) -> int:
    """Floor a span to whole minutes, clamped at zero."""
    return max(0, delta // timedelta(minutes=1))


def has_missing_break_start(entry: TimeEntry) -> bool:
    """True for the integrity fault of an on-break entry without a break start."""
    return entry.status == EntryStatus.ON_BREAK and entry.break_started_at is None


def worked_milliseconds(entry: TimeEntry, now: datetime) -> int:
    """
    Worked time of an entry evaluated at ``now``.

    Running entries are measured up to ``now`` and an in-progress break is
    subtracted live. An on-break entry missing its break start contributes
    no running break time. Never negative.
    """
    end = entry.end_time if entry.end_time is not None else now
    gross_ms = max(0, (end - entry.start_time) // MILLISECOND)
    completed_break_ms = max(0, entry.break_minutes) * MS_PER_MINUTE

    running_break_ms = 0
    if entry.status == EntryStatus.ON_BREAK and entry.break_started_at is not None:
        running_break_ms = max(0, (now - entry.break_started_at) // MILLISECOND)

    return max(0, gross_ms - completed_break_ms - running_break_ms)


def worked_minutes(entry: TimeEntry, now: datetime) -> int:
    return worked_milliseconds(entry, now) // MS_PER_MINUTE


def display_minutes(entry: TimeEntry, now: datetime) -> int:
    """
    Minutes shown in the UI and used by reports.

    A finished entry never reports less than its persisted ``total_minutes``.
    """
    minutes = worked_minutes(entry, now)
    if entry.end_time is not None:
        return max(entry.total_minutes, minutes)
    return minutes


def sum_display_minutes(entries: Iterable[TimeEntry], now: datetime) -> int:
    return sum(display_minutes(entry, now) for entry in entries)
