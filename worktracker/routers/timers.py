"""Timer endpoints - time tracking operations."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator

from worktracker.database import get_database
from worktracker.models.time_entry import (
    ManualEntryCreate,
    TimeEntry,
    TimeEntryUpdate,
    to_local_naive,
)
from worktracker.routers.auth import get_current_user_id
from worktracker.routers.errors import to_http_exception
from worktracker.services.profile_service import ProfileService
from worktracker.services.session import SessionRegistry, get_session_registry
from worktracker.services.timer_service import TimerService
from worktracker.utils.clock import get_clock
from worktracker.utils.formatting import format_clock


router = APIRouter(prefix="/timers", tags=["timers"])


class TimerStart(BaseModel):
    """Request model for starting a timer."""

    project_slug: Optional[str] = None
    task_name: str = ""
    note: str = ""
    start_time: Optional[datetime] = None

    @field_validator("start_time")
    @classmethod
    def convert_to_local_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v)


class IdleStatus(BaseModel):
    """Idle state and running clock of the user's tracking session."""

    idle: bool
    idle_minutes: int
    last_activity: Optional[datetime] = None
    idle_since: Optional[datetime] = None
    entry_id: Optional[str] = None
    elapsed_ms: Optional[int] = None
    elapsed: Optional[str] = None


def _idle_status(session) -> IdleStatus:
    entry = session.running_entry
    return IdleStatus(
        idle=session.monitor.signal_raised,
        idle_minutes=session.monitor.idle_minutes,
        last_activity=session.monitor.last_activity,
        idle_since=session.idle_since,
        entry_id=entry.id if entry else None,
        elapsed_ms=session.elapsed_ms,
        elapsed=format_clock(session.elapsed_ms) if session.elapsed_ms is not None else None,
    )


@router.post("/start", response_model=TimeEntry)
async def start_timer(
    timer_start: TimerStart,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """
    Start a new timer.

    - Only one timer can run at a time
    - Project is optional; entries without one go under "General"
    """
    service = TimerService(db, clock)
    try:
        return await service.start_timer(
            user_id=user_id,
            project_slug=timer_start.project_slug,
            task_name=timer_start.task_name,
            note=timer_start.note,
            start_time=timer_start.start_time,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/break/start", response_model=TimeEntry)
async def start_break(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Put the running timer on break."""
    try:
        return await TimerService(db, clock).start_break(user_id=user_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/break/end", response_model=TimeEntry)
async def end_break(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Resume the running timer after a break."""
    try:
        return await TimerService(db, clock).end_break(user_id=user_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/break/toggle", response_model=TimeEntry)
async def toggle_break(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Start a break, or end the current one."""
    try:
        return await TimerService(db, clock).toggle_break(user_id=user_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.post("/clock-out", response_model=TimeEntry)
async def clock_out(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """
    Stop the currently running timer.

    - An in-progress break is closed at the same instant
    """
    try:
        return await TimerService(db, clock).clock_out(user_id=user_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/current", response_model=TimeEntry)
async def get_current_timer(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get the currently running timer.

    - Returns 404 if no timer is running
    """
    entry = await TimerService(db).get_current_timer(user_id=user_id)

    if not entry:
        raise HTTPException(status_code=404, detail="No timer running")

    return entry


@router.post("/activity", response_model=IdleStatus)
async def record_activity(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Report user activity.

    Starts the user's tracking session on first use and re-arms the idle
    reminder.
    """
    profile = await ProfileService(db).get_profile(user_id)
    session = registry.get_or_start(user_id, profile.settings.idle_minutes)
    if session.feed.latest(user_id) is None:
        await TimerService(db, clock, session.feed).publish_entries(user_id)

    session.record_activity(clock.now())
    session.refresh_clock()
    return _idle_status(session)


@router.get("/idle", response_model=IdleStatus)
async def get_idle_status(
    user_id: str = Depends(get_current_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Whether the idle reminder has fired since the last reported activity.

    - Returns 404 if the user has no tracking session
    """
    session = registry.get(user_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No tracking session")

    return _idle_status(session)


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    project_slug: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List time entries for the authenticated user.

    - Optional filters: project_slug, start_date, end_date
    - Results sorted by start_time descending (most recent first)
    """
    return await TimerService(db).list_entries(
        user_id=user_id,
        project_slug=project_slug,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", response_model=TimeEntry)
async def log_manual(
    entry_create: ManualEntryCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """
    Log a finished session manually.

    - End time must be after start time
    """
    try:
        return await TimerService(db, clock).log_manual(
            user_id=user_id,
            entry_create=entry_create,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Get a specific time entry by ID."""
    try:
        return await TimerService(db).get_entry(user_id=user_id, entry_id=entry_id)
    except ValueError as e:
        raise to_http_exception(e)


@router.patch("/{entry_id}", response_model=TimeEntry)
async def edit_entry(
    entry_id: str,
    entry_update: TimeEntryUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """
    Edit a time entry.

    - The entry is marked completed and its total recomputed
    """
    try:
        return await TimerService(db, clock).edit_entry(
            user_id=user_id,
            entry_id=entry_id,
            entry_update=entry_update,
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Delete a time entry.

    - Hard delete (permanent)
    """
    try:
        return await TimerService(db).delete_entry(user_id=user_id, entry_id=entry_id)
    except ValueError as e:
        raise to_http_exception(e)
