"""Pytest configuration and fixtures."""
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from worktracker.models.time_entry import EntryStatus, TimeEntry
from worktracker.utils.clock import FixedClock


@pytest.fixture
def fixed_clock():
    """Clock frozen at Monday 2024-03-04 17:00."""
    return FixedClock(datetime(2024, 3, 4, 17, 0))


@pytest.fixture
def make_entry():
    """Factory for entries with sensible defaults."""

    def _make_entry(**fields) -> TimeEntry:
        values = {
            "id": "entry1",
            "user_id": "user123",
            "start_time": datetime(2024, 3, 4, 9, 0),
            "status": EntryStatus.ACTIVE,
        }
        values.update(fields)
        return TimeEntry(**values)

    return _make_entry


@pytest.fixture
def mock_db():
    """
    MagicMock database whose collections are AsyncMocks.

    ``find`` is a plain MagicMock returning a chainable cursor so tests
    only need to set ``cursor.to_list.return_value``.
    """
    collections = {}

    def collection(name):
        if name not in collections:
            coll = AsyncMock()
            cursor = MagicMock()
            cursor.sort.return_value = cursor
            cursor.limit.return_value = cursor
            cursor.to_list = AsyncMock(return_value=[])
            coll.find = MagicMock(return_value=cursor)
            coll.cursor = cursor
            coll.find_one.return_value = None
            collections[name] = coll
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = collection
    return db


@pytest_asyncio.fixture
async def app_client(mock_db, fixed_clock):
    """
    Async HTTP client against the app with storage, auth and clock overridden.

    Every request is made as user ``user123`` at the fixed clock's instant.
    """
    from worktracker.database import get_database
    from worktracker.main import app
    from worktracker.routers.auth import get_current_user_id
    from worktracker.services.feed import EntryFeed
    from worktracker.services.session import SessionRegistry, get_session_registry
    from worktracker.utils.clock import get_clock

    registry = SessionRegistry(EntryFeed(), clock=fixed_clock)
    app.dependency_overrides[get_database] = lambda: mock_db
    app.dependency_overrides[get_current_user_id] = lambda: "user123"
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    app.dependency_overrides[get_session_registry] = lambda: registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    registry.stop_all()
    app.dependency_overrides.clear()
