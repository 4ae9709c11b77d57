"""Integration tests for project and profile endpoints."""
import pytest
from datetime import datetime
from unittest.mock import MagicMock

from bson import ObjectId


@pytest.mark.asyncio
class TestProjectEndpoints:
    """Tests for project CRUD."""

    async def test_create_project(self, app_client, mock_db):
        """Test creating a project returns its slug."""
        mock_db["projects"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        response = await app_client.post("/projects", json={"name": "Client Work"})

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "client-work"
        assert data["color"] == "#0ea5e9"

    async def test_create_project_blank_name(self, app_client):
        """Test a blank project name is rejected."""
        response = await app_client.post("/projects", json={"name": "  "})

        assert response.status_code == 400

    async def test_update_missing_project(self, app_client, mock_db):
        """Test renaming a missing project."""
        mock_db["projects"].find_one_and_update.return_value = None

        response = await app_client.patch(f"/projects/{ObjectId()}", json={"name": "Clients"})

        assert response.status_code == 404

    async def test_list_projects(self, app_client, mock_db):
        """Test listing projects."""
        mock_db["projects"].cursor.to_list.return_value = [{
            "_id": ObjectId(),
            "user_id": "user123",
            "name": "Client Work",
            "color": "#16a34a",
            "slug": "client-work",
            "created_at": datetime(2024, 3, 1),
            "updated_at": datetime(2024, 3, 1),
        }]

        response = await app_client.get("/projects")

        assert response.status_code == 200
        assert [project["slug"] for project in response.json()] == ["client-work"]


@pytest.mark.asyncio
class TestProfileEndpoints:
    """Tests for the profile endpoints."""

    async def test_get_default_profile(self, app_client):
        """Test a user without a stored profile gets the defaults."""
        response = await app_client.get("/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["hourly_rate"] == 0.0
        assert data["settings"] == {"currency": "USD", "dark_mode": False, "idle_minutes": 10}

    async def test_save_profile_updates_running_session(self, app_client, mock_db):
        """Test that a new idle threshold reaches the running session."""
        await app_client.post("/timers/activity")

        response = await app_client.put(
            "/profile",
            json={"hourly_rate": 25, "settings": {"currency": "EUR", "idle_minutes": 3}},
        )

        assert response.status_code == 200
        assert response.json()["settings"]["currency"] == "EUR"
        mock_db["profiles"].update_one.assert_called_once()

        idle = await app_client.get("/timers/idle")
        assert idle.json()["idle_minutes"] == 3

    async def test_save_profile_rejects_negative_rate(self, app_client):
        """Test that negative hourly rates fail validation."""
        response = await app_client.put(
            "/profile",
            json={"hourly_rate": -5, "settings": {}},
        )

        assert response.status_code == 422
