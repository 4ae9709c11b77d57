"""Time entry lifecycle: active -> on-break -> active -> completed.

Each transition takes an entry snapshot and returns the next full entry
without touching the one it was given. Persisting the result is left to
``TimerService``, which writes the fields reported by ``entry_changes``.
"""
import logging
from datetime import datetime
from typing import Optional

from worktracker.exceptions import InvalidStateError, MissingBreakStartError, ValidationError
from worktracker.models.time_entry import (
    GENERAL_PROJECT,
    BreakRecord,
    EntrySource,
    EntryStatus,
    TimeEntry,
)
from worktracker.services.durations import whole_minutes

logger = logging.getLogger(__name__)

# Fields owned by the storage layer, never part of a transition delta
_STORAGE_FIELDS = {"id", "created_at", "updated_at"}


def _require_owner(user_id: Optional[str]) -> str:
    if not user_id or not user_id.strip():
        raise ValidationError("An authenticated user is required.")
    return user_id


def _project_name(project_slug: Optional[str], project_name: Optional[str]) -> str:
    if project_slug is None:
        return GENERAL_PROJECT
    return (project_name or "").strip() or GENERAL_PROJECT


def start_timer(
    user_id: str,
    start_time: datetime,
    task_name: str = "",
    note: str = "",
    project_slug: Optional[str] = None,
    project_name: Optional[str] = None,
) -> TimeEntry:
    """
    Open a new running entry.

    Raises:
        ValidationError: If no owner is given
    """
    return TimeEntry(
        user_id=_require_owner(user_id),
        project_slug=project_slug,
        project_name=_project_name(project_slug, project_name),
        task_name=task_name.strip(),
        note=note.strip(),
        start_time=start_time,
        end_time=None,
        status=EntryStatus.ACTIVE,
        source=EntrySource.TIMER,
    )


def log_manual(
    user_id: str,
    start_time: datetime,
    end_time: datetime,
    task_name: str = "",
    note: str = "",
    project_slug: Optional[str] = None,
    project_name: Optional[str] = None,
) -> TimeEntry:
    """
    Record an already finished session.

    Raises:
        ValidationError: If no owner is given or end is not after start
    """
    _require_owner(user_id)
    if end_time <= start_time:
        raise ValidationError("End time must be later than start time.")

    return TimeEntry(
        user_id=user_id,
        project_slug=project_slug,
        project_name=_project_name(project_slug, project_name),
        task_name=task_name.strip(),
        note=note.strip(),
        start_time=start_time,
        end_time=end_time,
        status=EntryStatus.COMPLETED,
        source=EntrySource.MANUAL,
        total_minutes=whole_minutes(end_time - start_time),
    )


def start_break(entry: TimeEntry, at: datetime) -> TimeEntry:
    """
    Pause an active entry.

    Raises:
        InvalidStateError: If the entry is not active
    """
    if entry.status != EntryStatus.ACTIVE:
        raise InvalidStateError(
            f"Cannot start a break on an entry that is {entry.status.value}."
        )

    return entry.model_copy(update={
        "status": EntryStatus.ON_BREAK,
        "break_started_at": at,
    })


def _fold_break(entry: TimeEntry, at: datetime) -> dict:
    """Close the in-progress break at ``at`` and return the updated break fields."""
    duration = whole_minutes(at - entry.break_started_at)
    record = BreakRecord(
        start_time=entry.break_started_at,
        end_time=at,
        duration_minutes=duration,
    )
    return {
        "break_minutes": max(0, entry.break_minutes) + duration,
        "breaks": [*entry.breaks, record],
        "break_started_at": None,
    }


def end_break(entry: TimeEntry, at: datetime) -> TimeEntry:
    """
    Resume work after a break.

    Raises:
        InvalidStateError: If the entry is not on break
        MissingBreakStartError: If the entry is on break without a start instant
    """
    if entry.status != EntryStatus.ON_BREAK:
        raise InvalidStateError("Entry is not on break.")
    if entry.break_started_at is None:
        raise MissingBreakStartError("Break start time is missing.")

    return entry.model_copy(update={
        **_fold_break(entry, at),
        "status": EntryStatus.ACTIVE,
    })


def toggle_break(entry: TimeEntry, at: datetime) -> TimeEntry:
    """End the break if on one, otherwise start one."""
    if entry.status == EntryStatus.ON_BREAK:
        return end_break(entry, at)
    return start_break(entry, at)


def clock_out(entry: TimeEntry, at: datetime) -> TimeEntry:
    """
    Finish a running entry, folding any in-progress break first.

    Raises:
        InvalidStateError: If the entry is already completed
    """
    if entry.status == EntryStatus.COMPLETED:
        raise InvalidStateError("Entry is already completed.")

    break_fields = {
        "break_minutes": max(0, entry.break_minutes),
        "breaks": list(entry.breaks),
        "break_started_at": None,
    }
    if entry.status == EntryStatus.ON_BREAK:
        if entry.break_started_at is not None:
            break_fields = _fold_break(entry, at)
        else:
            logger.warning(
                "Clocking out entry %s on break without a break start; "
                "in-progress break ignored",
                entry.id,
            )

    gross_minutes = whole_minutes(at - entry.start_time)
    total_minutes = max(0, gross_minutes - break_fields["break_minutes"])

    return entry.model_copy(update={
        **break_fields,
        "end_time": at,
        "total_minutes": total_minutes,
        "status": EntryStatus.COMPLETED,
    })


def edit_entry(
    entry: TimeEntry,
    start_time: datetime,
    end_time: datetime,
    task_name: str = "",
    note: str = "",
    project_slug: Optional[str] = None,
    project_name: Optional[str] = None,
) -> TimeEntry:
    """
    Replace an entry's fields and recompute its total.

    Existing break minutes are kept and subtracted; the break list is not
    re-derived. The entry always ends up completed.

    Raises:
        ValidationError: If end is not after start
    """
    if end_time <= start_time:
        raise ValidationError("End time must be later than start time.")

    gross_minutes = whole_minutes(end_time - start_time)
    total_minutes = max(0, gross_minutes - max(0, entry.break_minutes))

    return entry.model_copy(update={
        "project_slug": project_slug,
        "project_name": _project_name(project_slug, project_name),
        "task_name": task_name.strip(),
        "note": note.strip(),
        "start_time": start_time,
        "end_time": end_time,
        "total_minutes": total_minutes,
        "status": EntryStatus.COMPLETED,
        "break_started_at": None,
    })


def to_document(entry: TimeEntry) -> dict:
    """Serialize an entry to the MongoDB document shape (no ``_id``)."""
    doc = entry.model_dump(exclude={"id"})
    doc["status"] = entry.status.value
    doc["source"] = entry.source.value
    return doc


def entry_changes(before: TimeEntry, after: TimeEntry) -> dict:
    """
    Persisted fields that differ between two snapshots of the same entry.

    Examples:
        >>> entry = start_timer("user123", datetime(2024, 3, 4, 9, 0))
        >>> sorted(entry_changes(entry, start_break(entry, datetime(2024, 3, 4, 12, 0))))
        ['break_started_at', 'status']
    """
    old_doc = to_document(before)
    new_doc = to_document(after)
    return {
        key: value
        for key, value in new_doc.items()
        if key not in _STORAGE_FIELDS and old_doc.get(key) != value
    }
