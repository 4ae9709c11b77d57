"""Derived report shapes. None of these are persisted."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from worktracker.models.time_entry import TimeEntry


class DaySummary(BaseModel):
    """Totals for one calendar day keyed by ``YYYY-MM-DD``."""

    day_key: str
    minutes: int = 0
    sessions: int = 0
    first_in: Optional[datetime] = None
    last_out: Optional[datetime] = None


class ReportPoint(BaseModel):
    """One day in a dense trailing window."""

    day_key: str
    day_label: str
    minutes: int
    hours: float
    earnings: float


class WorkWeek(BaseModel):
    """Monday 00:00 through Saturday 23:59:59.999 bucket of entries."""

    key: str
    start_date: datetime
    end_date: datetime
    entries: list[TimeEntry] = Field(default_factory=list)
    total_minutes: int = 0


class CalendarCell(BaseModel):
    """Grid cell; ``date`` is None for leading/trailing blanks."""

    key: str
    date: Optional[datetime] = None


class ExportField(str, Enum):
    """Columns a caller may pick for an export projection."""

    DATE = "date"
    TIME_IN = "timeIn"
    TIME_OUT = "timeOut"
    DURATION = "duration"
    PROJECT = "project"
    TASK = "task"
    STATUS = "status"
    EARNINGS = "earnings"
    NOTE = "note"


EXPORT_FIELD_LABELS = {
    ExportField.DATE: "Date",
    ExportField.TIME_IN: "Time In",
    ExportField.TIME_OUT: "Time Out",
    ExportField.DURATION: "Duration",
    ExportField.PROJECT: "Project",
    ExportField.TASK: "Task",
    ExportField.STATUS: "Status",
    ExportField.EARNINGS: "Earnings",
    ExportField.NOTE: "Note",
}

DEFAULT_EXPORT_FIELDS = [
    ExportField.DATE,
    ExportField.TIME_IN,
    ExportField.TIME_OUT,
    ExportField.DURATION,
]


class ExportSection(BaseModel):
    """One work week rendered as label:value rows."""

    label: str
    total_minutes: int
    total_label: str
    rows: list[list[str]]


class ExportRequest(BaseModel):
    """Export request model."""

    start_date: str
    end_date: str
    fields: list[ExportField] = Field(default_factory=lambda: list(DEFAULT_EXPORT_FIELDS))
