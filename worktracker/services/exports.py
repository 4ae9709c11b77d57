"""Timesheet export projections.

Both the CSV download and the PDF renderer consume work-week sections built
here; this module never produces PDF bytes itself.
"""
import csv
import io
from datetime import datetime, time
from typing import Iterable, Sequence

from worktracker.exceptions import ValidationError
from worktracker.models.report import EXPORT_FIELD_LABELS, ExportField, ExportSection
from worktracker.models.time_entry import TimeEntry
from worktracker.models.user import Currency
from worktracker.services.durations import display_minutes
from worktracker.services.reports import group_by_work_week, work_week_label
from worktracker.utils.formatting import (
    format_currency,
    format_date,
    format_datetime,
    format_duration,
    format_time,
    parse_day_key,
)

CSV_HEADER = [
    "Date",
    "Project",
    "Task",
    "Start",
    "End",
    "Worked Minutes",
    "Break Minutes",
    "Status",
    "Source",
    "Earnings",
    "Note",
]


def _field_value(
    field: ExportField,
    entry: TimeEntry,
    minutes: int,
    hourly_rate: float,
    currency: Currency,
) -> str:
    if field == ExportField.DATE:
        return format_date(entry.start_time)
    if field == ExportField.TIME_IN:
        return format_time(entry.start_time)
    if field == ExportField.TIME_OUT:
        return format_time(entry.end_time) if entry.end_time else "-"
    if field == ExportField.DURATION:
        return format_duration(minutes)
    if field == ExportField.PROJECT:
        return entry.project_name
    if field == ExportField.TASK:
        return entry.task_name or "-"
    if field == ExportField.STATUS:
        return entry.status.value
    if field == ExportField.EARNINGS:
        return format_currency(minutes / 60 * hourly_rate, currency)
    return entry.note or "-"


def project_entry(
    entry: TimeEntry,
    fields: Sequence[ExportField],
    hourly_rate: float,
    currency: Currency,
    now: datetime,
) -> list[str]:
    """
    Render the selected fields of one entry as ``Label: value`` strings.

    Raises:
        ValidationError: If no field is selected
    """
    if not fields:
        raise ValidationError("Select at least one field for export.")

    minutes = display_minutes(entry, now)
    return [
        f"{EXPORT_FIELD_LABELS[field]}: "
        f"{_field_value(field, entry, minutes, hourly_rate, currency)}"
        for field in fields
    ]


def _selected_in_order(fields: Iterable[ExportField]) -> list[ExportField]:
    selected = set(fields)
    return [field for field in ExportField if field in selected]


def build_export(
    entries: Iterable[TimeEntry],
    start_date: str,
    end_date: str,
    fields: Iterable[ExportField],
    hourly_rate: float,
    currency: Currency,
    now: datetime,
) -> list[ExportSection]:
    """
    Work-week sections for entries starting inside an inclusive day range.

    Raises:
        ValidationError: On a malformed or reversed range, an empty field
            selection, or a range holding no entries
    """
    start_day = parse_day_key(start_date)
    end_day = parse_day_key(end_date)
    if start_day is None or end_day is None:
        raise ValidationError("Select a valid start and end date.")

    range_start = start_day
    range_end = datetime.combine(end_day.date(), time(23, 59, 59, 999000))
    if range_start > range_end:
        raise ValidationError("Start date must be before or equal to end date.")

    selected = _selected_in_order(fields)
    if not selected:
        raise ValidationError("Select at least one field for export.")

    in_range = [
        entry for entry in entries
        if range_start <= entry.start_time <= range_end
    ]
    if not in_range:
        raise ValidationError("No logs found in that date range.")

    sections = []
    for week in group_by_work_week(in_range, now):
        sections.append(ExportSection(
            label=work_week_label(week),
            total_minutes=week.total_minutes,
            total_label=format_duration(week.total_minutes),
            rows=[
                project_entry(entry, selected, hourly_rate, currency, now)
                for entry in week.entries
            ],
        ))
    return sections


def render_csv(
    entries: Sequence[TimeEntry],
    hourly_rate: float,
    currency: Currency,
    now: datetime,
) -> str:
    """
    Timesheet CSV grouped by work week.

    Raises:
        ValidationError: If there are no entries
    """
    if not entries:
        raise ValidationError("No logs available to export.")

    handle = io.StringIO()
    writer = csv.writer(handle, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")

    for week in group_by_work_week(entries, now):
        writer.writerow([work_week_label(week)])
        writer.writerow(CSV_HEADER)

        for entry in week.entries:
            minutes = display_minutes(entry, now)
            writer.writerow([
                format_date(entry.start_time),
                entry.project_name,
                entry.task_name or "-",
                format_datetime(entry.start_time),
                format_datetime(entry.end_time) if entry.end_time else "-",
                minutes,
                entry.break_minutes,
                entry.status.value,
                entry.source.value,
                format_currency(minutes / 60 * hourly_rate, currency),
                entry.note,
            ])

        writer.writerow([
            "Week Total",
            "",
            "",
            "",
            "",
            week.total_minutes,
            "",
            "",
            "",
            format_currency(week.total_minutes / 60 * hourly_rate, currency),
            "",
        ])
        writer.writerow([])

    return handle.getvalue()
