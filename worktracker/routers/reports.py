"""Report endpoints - daily totals, work weeks, calendar and exports."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from worktracker.database import get_database
from worktracker.models.report import (
    CalendarCell,
    DaySummary,
    ExportRequest,
    ExportSection,
    ReportPoint,
    WorkWeek,
)
from worktracker.routers.auth import get_current_user_id
from worktracker.routers.errors import to_http_exception
from worktracker.services import exports, reports
from worktracker.services.calendar_grid import build_month_calendar
from worktracker.services.profile_service import ProfileService
from worktracker.services.timer_service import TimerService
from worktracker.utils.clock import get_clock
from worktracker.utils.formatting import day_key


router = APIRouter(prefix="/reports", tags=["reports"])


class LastDaysReport(BaseModel):
    """Dense trailing window plus its totals."""

    points: list[ReportPoint]
    total_minutes: int
    total_earnings: float
    sessions: int
    currency: str


class CalendarMonth(BaseModel):
    """Month grid with per-day totals for the non-blank cells."""

    month: str
    cells: list[CalendarCell]
    days: dict[str, DaySummary]


@router.get("/days", response_model=dict[str, DaySummary])
async def get_day_summaries(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Per-day minutes, sessions and first-in/last-out. Empty days are omitted."""
    entries = await TimerService(db, clock).list_entries(user_id=user_id)
    return reports.summarize_days(entries, clock.now())


@router.get("/last-days", response_model=LastDaysReport)
async def get_last_days(
    days: int = Query(7, ge=1, le=366),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """One point per day for the trailing window ending today."""
    now = clock.now()
    profile = await ProfileService(db).get_profile(user_id)
    entries = await TimerService(db, clock).list_entries(user_id=user_id)

    points = reports.build_last_days_report(entries, days, profile.hourly_rate, now)
    window = reports.summarize_range(entries, days, now)
    return LastDaysReport(
        points=points,
        total_minutes=sum(point.minutes for point in points),
        total_earnings=sum(point.earnings for point in points),
        sessions=window.sessions,
        currency=profile.settings.currency.value,
    )


@router.get("/weeks", response_model=list[WorkWeek])
async def get_work_weeks(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Entries grouped into Monday-Saturday work weeks, oldest first."""
    entries = await TimerService(db, clock).list_entries(user_id=user_id)
    return reports.group_by_work_week(entries, clock.now())


@router.get("/calendar", response_model=CalendarMonth)
async def get_calendar(
    month: Optional[str] = Query(None, description="Month as YYYY-MM"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Monday-first month grid; an invalid month falls back to the current one."""
    cells = build_month_calendar(month or "", clock)
    first_day = next(cell.date for cell in cells if cell.date is not None)

    entries = await TimerService(db, clock).list_entries(user_id=user_id)
    summary = reports.summarize_days(entries, clock.now())
    cell_keys = {day_key(cell.date) for cell in cells if cell.date is not None}

    return CalendarMonth(
        month=f"{first_day.year:04d}-{first_day.month:02d}",
        cells=cells,
        days={key: day for key, day in summary.items() if key in cell_keys},
    )


@router.post("/export", response_model=list[ExportSection])
async def export_sections(
    export_request: ExportRequest,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """
    Work-week sections of ``Label: value`` rows for a date range.

    - At least one field must be selected
    - The range must contain at least one entry
    """
    profile = await ProfileService(db).get_profile(user_id)
    entries = await TimerService(db, clock).list_entries(user_id=user_id)

    try:
        return exports.build_export(
            entries,
            start_date=export_request.start_date,
            end_date=export_request.end_date,
            fields=export_request.fields,
            hourly_rate=profile.hourly_rate,
            currency=profile.settings.currency,
            now=clock.now(),
        )
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/export.csv", response_class=PlainTextResponse)
async def export_csv(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    clock=Depends(get_clock),
):
    """Timesheet CSV of all entries grouped by work week."""
    now = clock.now()
    profile = await ProfileService(db).get_profile(user_id)
    entries = await TimerService(db, clock).list_entries(user_id=user_id)

    try:
        text = exports.render_csv(entries, profile.hourly_rate, profile.settings.currency, now)
    except ValueError as e:
        raise to_http_exception(e)

    return PlainTextResponse(
        text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="timesheet-{day_key(now)}.csv"'},
    )
