"""Day and work-week aggregation over entry snapshots."""
from datetime import date, datetime, time, timedelta
from typing import Iterable

from worktracker.models.report import DaySummary, ReportPoint, WorkWeek
from worktracker.models.time_entry import TimeEntry
from worktracker.services.durations import display_minutes
from worktracker.utils.formatting import day_key, format_date


def summarize_days(entries: Iterable[TimeEntry], now: datetime) -> dict[str, DaySummary]:
    """
    Group entries by the local calendar day of their start instant.

    Days without entries are absent from the result.
    """
    summary: dict[str, DaySummary] = {}

    for entry in entries:
        key = day_key(entry.start_time)
        end_time = entry.end_time if entry.end_time is not None else now
        day = summary.get(key)
        if day is None:
            day = DaySummary(day_key=key)
            summary[key] = day

        day.minutes += display_minutes(entry, now)
        day.sessions += 1
        if day.first_in is None or entry.start_time < day.first_in:
            day.first_in = entry.start_time
        if day.last_out is None or end_time > day.last_out:
            day.last_out = end_time

    return summary


def trailing_days(days: int, now: datetime) -> list[date]:
    """The ``days`` calendar days ending with ``now``'s day, oldest first."""
    today = now.date()
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def build_last_days_report(
    entries: Iterable[TimeEntry],
    days: int,
    hourly_rate: float,
    now: datetime,
) -> list[ReportPoint]:
    """
    Dense trailing window of daily minutes, hours and earnings.

    Every day in the window gets a point, including days with no entries.
    """
    minutes_by_day = {day_key(day): 0 for day in trailing_days(days, now)}

    for entry in entries:
        key = day_key(entry.start_time)
        if key not in minutes_by_day:
            continue
        minutes_by_day[key] += display_minutes(entry, now)

    points = []
    for day in trailing_days(days, now):
        key = day_key(day)
        minutes = minutes_by_day[key]
        hours = minutes / 60
        points.append(ReportPoint(
            day_key=key,
            day_label=f"{day:%a}",
            minutes=minutes,
            hours=hours,
            earnings=hours * hourly_rate,
        ))
    return points


def summarize_range(
    entries: Iterable[TimeEntry],
    days: int,
    now: datetime,
) -> DaySummary:
    """Totals across the trailing ``days`` window, keyed by the window's first day."""
    window = {day_key(day) for day in trailing_days(days, now)}
    by_day = summarize_days(
        (entry for entry in entries if day_key(entry.start_time) in window),
        now,
    )

    total = DaySummary(day_key=min(window))
    for day in by_day.values():
        total.minutes += day.minutes
        total.sessions += day.sessions
        if total.first_in is None or day.first_in < total.first_in:
            total.first_in = day.first_in
        if total.last_out is None or day.last_out > total.last_out:
            total.last_out = day.last_out
    return total


def work_week_start(instant: datetime) -> datetime:
    """
    Monday 00:00 of the work week containing ``instant``.

    Sunday belongs to the week that ended the day before, so a Sunday is
    first rolled back to Saturday and only then snapped to Monday.

    Examples:
        >>> work_week_start(datetime(2024, 3, 10, 8, 0))
        datetime.datetime(2024, 3, 4, 0, 0)
        >>> work_week_start(datetime(2024, 3, 11, 8, 0))
        datetime.datetime(2024, 3, 11, 0, 0)
    """
    day = datetime.combine(instant.date(), time.min)
    if day.weekday() == 6:
        day -= timedelta(days=1)

    return day - timedelta(days=day.weekday())


def work_week_end(week_start: datetime) -> datetime:
    """Saturday 23:59:59.999 of the week starting at ``week_start``."""
    saturday = week_start.date() + timedelta(days=5)
    return datetime.combine(saturday, time(23, 59, 59, 999000))


def work_week_label(week: WorkWeek) -> str:
    return (
        f"Week {format_date(week.start_date)} - {format_date(week.end_date)} "
        "(Monday-Saturday)"
    )


def group_by_work_week(entries: Iterable[TimeEntry], now: datetime) -> list[WorkWeek]:
    """
    Bucket entries into Monday-Saturday work weeks.

    Weeks come out oldest first and entries inside a week keep chronological
    order.
    """
    weeks: dict[str, WorkWeek] = {}

    for entry in sorted(entries, key=lambda item: item.start_time):
        week_start = work_week_start(entry.start_time)
        key = day_key(week_start)
        week = weeks.get(key)
        if week is None:
            week = WorkWeek(
                key=key,
                start_date=week_start,
                end_date=work_week_end(week_start),
            )
            weeks[key] = week

        week.entries.append(entry)
        week.total_minutes += display_minutes(entry, now)

    return sorted(weeks.values(), key=lambda week: week.start_date)
