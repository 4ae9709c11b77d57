"""Time entry model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

GENERAL_PROJECT = "General"


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert an offset-aware instant to naive host-local time.

    Stored entries and the clock are naive local time, so client timestamps
    carrying an offset are shifted into local time before any comparison.

    Examples:
        >>> to_local_naive(datetime(2024, 3, 4, 9, 0))
        datetime.datetime(2024, 3, 4, 9, 0)
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class EntryStatus(str, Enum):
    """Lifecycle states of a time entry."""

    ACTIVE = "active"
    ON_BREAK = "on-break"
    COMPLETED = "completed"


class EntrySource(str, Enum):
    """How the entry was created."""

    TIMER = "timer"
    MANUAL = "manual"


class BreakRecord(BaseModel):
    """One finished break inside an entry."""

    start_time: datetime
    end_time: datetime
    duration_minutes: int = Field(default=0, ge=0)


class TimeEntryBase(BaseModel):
    """Classification fields shared by every entry payload."""

    project_slug: Optional[str] = None
    project_name: str = GENERAL_PROJECT
    task_name: str = ""
    note: str = ""


class TimeRangePayload(TimeEntryBase):
    """Client payload carrying both bounds of a session."""

    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def convert_to_local_time(cls, v: datetime) -> datetime:
        return to_local_naive(v)


class ManualEntryCreate(TimeRangePayload):
    """Manual log creation model."""

    pass


class TimeEntryUpdate(TimeRangePayload):
    """Free-form edit of an entry; always leaves it completed."""

    pass


class TimeEntry(TimeEntryBase):
    """Full time entry model with database fields."""

    id: Optional[str] = Field(default=None, alias="_id", serialization_alias="id")
    user_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: EntryStatus = EntryStatus.ACTIVE
    source: EntrySource = EntrySource.TIMER
    total_minutes: int = Field(default=0, ge=0)
    break_minutes: int = Field(default=0, ge=0)
    breaks: list[BreakRecord] = Field(default_factory=list)
    break_started_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"populate_by_name": True}

    @property
    def is_running(self) -> bool:
        return self.end_time is None and self.status != EntryStatus.COMPLETED
