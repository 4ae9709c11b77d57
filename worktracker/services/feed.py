"""Per-user entry feed delivering full replacement snapshots."""
import logging
from collections import defaultdict
from typing import Callable, Optional

from worktracker.models.time_entry import TimeEntry

logger = logging.getLogger(__name__)

EntryListener = Callable[[list[TimeEntry]], None]


class EntryFeed:
    """
    Observer registry between the storage layer and its consumers.

    Publishers push the whole collection for a user after every change;
    listeners never receive partial updates.
    """

    def __init__(self):
        self._listeners: dict[str, list[EntryListener]] = defaultdict(list)
        self._latest: dict[str, list[TimeEntry]] = {}

    def subscribe(self, user_id: str, listener: EntryListener) -> Callable[[], None]:
        """
        Register a listener for one user's entries.

        Returns:
            Callable that removes the listener again
        """
        self._listeners[user_id].append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(user_id, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(user_id, None)

        return unsubscribe

    def publish(self, user_id: str, entries: list[TimeEntry]) -> None:
        snapshot = list(entries)
        self._latest[user_id] = snapshot

        for listener in list(self._listeners.get(user_id, [])):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Entry listener failed for user %s", user_id)

    def latest(self, user_id: str) -> Optional[list[TimeEntry]]:
        return self._latest.get(user_id)

    def listener_count(self, user_id: str) -> int:
        return len(self._listeners.get(user_id, []))


# Global feed instance
entry_feed = EntryFeed()


def get_entry_feed() -> EntryFeed:
    """Dependency to get the entry feed."""
    return entry_feed
