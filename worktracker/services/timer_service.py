"""Timer service - applies entry transitions and persists their deltas."""
import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from worktracker.config import settings
from worktracker.database import PROJECTS_COLLECTION, TIME_ENTRIES_COLLECTION
from worktracker.exceptions import InvalidStateError, NotFoundError
from worktracker.models.time_entry import (
    GENERAL_PROJECT,
    BreakRecord,
    EntrySource,
    EntryStatus,
    ManualEntryCreate,
    TimeEntry,
    TimeEntryUpdate,
)
from worktracker.services import lifecycle
from worktracker.services.durations import has_missing_break_start
from worktracker.services.feed import EntryFeed, entry_feed
from worktracker.utils.clock import Clock, system_clock

logger = logging.getLogger(__name__)


class TimerService:
    """Service for handling time tracking operations."""

    def __init__(self, db, clock: Clock = system_clock, feed: EntryFeed = entry_feed):
        """Initialize service with database connection."""
        self.db = db
        self.clock = clock
        self.feed = feed
        self.time_entries = db[TIME_ENTRIES_COLLECTION]
        self.projects = db[PROJECTS_COLLECTION]

    @staticmethod
    def _read_minutes(value) -> int:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return 0
        return max(0, int(value))

    def _doc_to_entry(self, doc: dict) -> TimeEntry:
        """
        Convert database document to TimeEntry model.

        Stored values are normalized so a damaged document still loads:
        an ended entry reads as completed, an open entry with an unknown
        status as active, negative minutes as zero, and malformed break
        records are dropped.
        """
        status = doc.get("status")
        if doc.get("end_time") is not None:
            status = EntryStatus.COMPLETED.value
        elif status not in (EntryStatus.ACTIVE.value, EntryStatus.ON_BREAK.value):
            status = EntryStatus.ACTIVE.value

        breaks = []
        raw_breaks = doc.get("breaks")
        for raw in raw_breaks if isinstance(raw_breaks, list) else []:
            if not isinstance(raw, dict):
                continue
            if not isinstance(raw.get("start_time"), datetime) or not isinstance(raw.get("end_time"), datetime):
                continue
            breaks.append(BreakRecord(
                start_time=raw["start_time"],
                end_time=raw["end_time"],
                duration_minutes=self._read_minutes(raw.get("duration_minutes")),
            ))

        return TimeEntry(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            project_slug=doc.get("project_slug"),
            project_name=doc.get("project_name") or GENERAL_PROJECT,
            task_name=doc.get("task_name", ""),
            note=doc.get("note", ""),
            start_time=doc.get("start_time") or doc.get("created_at") or self.clock.now(),
            end_time=doc.get("end_time"),
            status=status,
            source=EntrySource.MANUAL if doc.get("source") == "manual" else EntrySource.TIMER,
            total_minutes=self._read_minutes(doc.get("total_minutes")),
            break_minutes=self._read_minutes(doc.get("break_minutes")),
            breaks=breaks,
            break_started_at=doc.get("break_started_at"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )

    def _object_id(self, entry_id: str) -> ObjectId:
        try:
            return ObjectId(entry_id)
        except (InvalidId, TypeError):
            raise NotFoundError("Invalid entry ID format")

    async def _resolve_project(
        self, user_id: str, project_slug: Optional[str]
    ) -> tuple[Optional[str], str]:
        """Map an optional project slug to ``(slug, display name)``."""
        if not project_slug:
            return None, GENERAL_PROJECT

        project = await self.projects.find_one({
            "user_id": user_id,
            "slug": project_slug,
        })
        if not project:
            raise NotFoundError("Project not found")

        return project_slug, project["name"]

    async def _find_running(self, user_id: str) -> Optional[dict]:
        return await self.time_entries.find_one({
            "user_id": user_id,
            "end_time": None,
        })

    async def _insert(self, entry: TimeEntry) -> TimeEntry:
        now = self.clock.now()
        entry_doc = lifecycle.to_document(entry)
        entry_doc["created_at"] = now
        entry_doc["updated_at"] = now

        result = await self.time_entries.insert_one(entry_doc)
        entry_doc["_id"] = result.inserted_id

        created = self._doc_to_entry(entry_doc)
        await self.publish_entries(entry.user_id)
        return created

    async def _apply(self, before: TimeEntry, after: TimeEntry, transition: str) -> TimeEntry:
        """Persist the delta between two snapshots of the same entry."""
        update_doc = lifecycle.entry_changes(before, after)
        update_doc["updated_at"] = self.clock.now()

        updated_doc = await self.time_entries.find_one_and_update(
            {"_id": ObjectId(before.id), "user_id": before.user_id},
            {"$set": update_doc},
            return_document=ReturnDocument.AFTER,
        )
        if not updated_doc:
            raise NotFoundError("Time entry not found")

        logger.info(
            "Applied %s to entry %s",
            transition,
            before.id,
            extra={"user_id": before.user_id, "entry_id": before.id, "transition": transition},
        )
        await self.publish_entries(before.user_id)
        return self._doc_to_entry(updated_doc)

    async def _running_entry(self, user_id: str) -> TimeEntry:
        running = await self._find_running(user_id)
        if not running:
            raise InvalidStateError("No timer running")

        entry = self._doc_to_entry(running)
        if has_missing_break_start(entry):
            logger.warning(
                "Entry %s is on break without a break start",
                entry.id,
                extra={"user_id": user_id, "entry_id": entry.id},
            )
        return entry

    async def publish_entries(self, user_id: str) -> None:
        """Push the user's full entry collection to feed listeners, if any."""
        if not self.feed.listener_count(user_id):
            return
        self.feed.publish(user_id, await self.list_entries(user_id))

    async def start_timer(
        self,
        user_id: str,
        project_slug: Optional[str] = None,
        task_name: str = "",
        note: str = "",
        start_time: Optional[datetime] = None,
    ) -> TimeEntry:
        """
        Start a new timer.

        Args:
            user_id: User ID
            project_slug: Optional project slug (None files under "General")
            task_name: Optional task name
            note: Optional note
            start_time: Optional start time (defaults to now)

        Returns:
            Created time entry

        Raises:
            InvalidStateError: If a timer is already running
            NotFoundError: If the project doesn't exist
        """
        if await self._find_running(user_id):
            raise InvalidStateError("Timer already running")

        slug, name = await self._resolve_project(user_id, project_slug)
        entry = lifecycle.start_timer(
            user_id=user_id,
            start_time=start_time or self.clock.now(),
            task_name=task_name,
            note=note,
            project_slug=slug,
            project_name=name,
        )
        return await self._insert(entry)

    async def start_break(self, user_id: str, at: Optional[datetime] = None) -> TimeEntry:
        """Put the running entry on break."""
        entry = await self._running_entry(user_id)
        updated = lifecycle.start_break(entry, at or self.clock.now())
        return await self._apply(entry, updated, "start-break")

    async def end_break(self, user_id: str, at: Optional[datetime] = None) -> TimeEntry:
        """Resume the running entry after its break."""
        entry = await self._running_entry(user_id)
        updated = lifecycle.end_break(entry, at or self.clock.now())
        return await self._apply(entry, updated, "end-break")

    async def toggle_break(self, user_id: str, at: Optional[datetime] = None) -> TimeEntry:
        entry = await self._running_entry(user_id)
        updated = lifecycle.toggle_break(entry, at or self.clock.now())
        transition = "end-break" if entry.status == EntryStatus.ON_BREAK else "start-break"
        return await self._apply(entry, updated, transition)

    async def clock_out(self, user_id: str, end_time: Optional[datetime] = None) -> TimeEntry:
        """
        Stop the currently running timer.

        Raises:
            InvalidStateError: If no timer is running
        """
        entry = await self._running_entry(user_id)
        updated = lifecycle.clock_out(entry, end_time or self.clock.now())
        return await self._apply(entry, updated, "clock-out")

    async def get_current_timer(self, user_id: str) -> Optional[TimeEntry]:
        """
        Get the currently running timer, if any.
        """
        running = await self._find_running(user_id)
        if not running:
            return None
        return self._doc_to_entry(running)

    async def get_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        doc = await self.time_entries.find_one({
            "_id": self._object_id(entry_id),
            "user_id": user_id,
        })
        if not doc:
            raise NotFoundError("Time entry not found")
        return self._doc_to_entry(doc)

    async def list_entries(
        self,
        user_id: str,
        project_slug: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[TimeEntry]:
        """
        List time entries for a user with optional filtering.

        Args:
            user_id: User ID
            project_slug: Optional project filter
            start_date: Optional lower bound on start time
            end_date: Optional upper bound on start time

        Returns:
            Time entries, most recent first
        """
        query = {
            "user_id": user_id,
        }

        if project_slug:
            query["project_slug"] = project_slug

        if start_date or end_date:
            query["start_time"] = {}
            if start_date:
                query["start_time"]["$gte"] = start_date
            if end_date:
                query["start_time"]["$lte"] = end_date

        cursor = (
            self.time_entries.find(query)
            .sort("start_time", -1)
            .limit(settings.entry_feed_limit)
        )
        entry_docs = await cursor.to_list(length=None)

        return [self._doc_to_entry(doc) for doc in entry_docs]

    async def log_manual(self, user_id: str, entry_create: ManualEntryCreate) -> TimeEntry:
        """
        Create a manual time entry.

        Raises:
            ValidationError: If end time is not after start time
            NotFoundError: If the project doesn't exist
        """
        slug, name = await self._resolve_project(user_id, entry_create.project_slug)
        entry = lifecycle.log_manual(
            user_id=user_id,
            start_time=entry_create.start_time,
            end_time=entry_create.end_time,
            task_name=entry_create.task_name,
            note=entry_create.note,
            project_slug=slug,
            project_name=name,
        )
        return await self._insert(entry)

    async def edit_entry(
        self,
        user_id: str,
        entry_id: str,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Edit a time entry; the result is always completed.

        Raises:
            ValidationError: If end time is not after start time
            NotFoundError: If the entry or project doesn't exist
        """
        entry = await self.get_entry(user_id, entry_id)
        slug, name = await self._resolve_project(user_id, entry_update.project_slug)
        updated = lifecycle.edit_entry(
            entry,
            start_time=entry_update.start_time,
            end_time=entry_update.end_time,
            task_name=entry_update.task_name,
            note=entry_update.note,
            project_slug=slug,
            project_name=name,
        )
        return await self._apply(entry, updated, "edit")

    async def delete_entry(self, user_id: str, entry_id: str) -> dict:
        """
        Delete a time entry.

        Returns:
            Dictionary with deleted_count

        Raises:
            NotFoundError: If entry not found
        """
        object_id = self._object_id(entry_id)
        result = await self.time_entries.delete_one({
            "_id": object_id,
            "user_id": user_id,
        })
        if not result.deleted_count:
            raise NotFoundError("Time entry not found")

        await self.publish_entries(user_id)
        return {"deleted_count": result.deleted_count}
