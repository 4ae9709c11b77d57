"""Integration tests for auth endpoints."""
import pytest
from datetime import datetime
from unittest.mock import MagicMock

from bson import ObjectId


@pytest.mark.asyncio
class TestAuthEndpoints:
    """Tests for registration, login and the current user."""

    async def test_register(self, app_client, mock_db):
        """Test registering a new user."""
        mock_db["users"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        response = await app_client.post(
            "/auth/register",
            json={"email": "test@example.com", "password": "password123", "name": "Test User"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "test@example.com"
        assert "hashed_password" not in data
        mock_db["profiles"].insert_one.assert_called_once()

    async def test_register_duplicate(self, app_client, mock_db):
        """Test registering an existing email."""
        mock_db["users"].find_one.return_value = {"email": "test@example.com"}

        response = await app_client.post(
            "/auth/register",
            json={"email": "test@example.com", "password": "password123", "name": "Test User"},
        )

        assert response.status_code == 400

    async def test_login_invalid(self, app_client):
        """Test login with unknown credentials."""
        response = await app_client.post(
            "/auth/login",
            json={"email": "nobody@example.com", "password": "password123"},
        )

        assert response.status_code == 401

    async def test_me_with_token(self, app_client, mock_db):
        """Test resolving the current user from a bearer token."""
        from worktracker.main import app
        from worktracker.routers.auth import get_current_user_id
        from worktracker.utils.auth import create_access_token

        app.dependency_overrides.pop(get_current_user_id)
        user_id = ObjectId()
        mock_db["users"].find_one.return_value = {
            "_id": user_id,
            "email": "test@example.com",
            "name": "Test User",
            "created_at": datetime(2024, 3, 1),
            "updated_at": datetime(2024, 3, 1),
        }
        token = create_access_token(user_id=str(user_id))

        response = await app_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["id"] == str(user_id)

    async def test_me_with_bad_token(self, app_client):
        """Test that a garbage token is rejected."""
        from worktracker.main import app
        from worktracker.routers.auth import get_current_user_id

        app.dependency_overrides.pop(get_current_user_id)

        response = await app_client.get("/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401

    async def test_logout_stops_session(self, app_client):
        """Test that logout stops the tracking session."""
        await app_client.post("/timers/activity")

        response = await app_client.post("/auth/logout")

        assert response.json() == {"stopped": True}
        assert (await app_client.get("/timers/idle")).status_code == 404
