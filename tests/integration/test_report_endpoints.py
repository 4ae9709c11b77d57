"""Integration tests for report endpoints."""
import pytest
from datetime import datetime

from bson import ObjectId


def completed_doc(start, end, **fields):
    doc = {
        "_id": ObjectId(),
        "user_id": "user123",
        "project_slug": None,
        "project_name": "General",
        "task_name": "",
        "note": "",
        "start_time": start,
        "end_time": end,
        "status": "completed",
        "source": "manual",
        "total_minutes": int((end - start).total_seconds() // 60),
        "break_minutes": 0,
        "breaks": [],
        "break_started_at": None,
        "created_at": start,
        "updated_at": end,
    }
    doc.update(fields)
    return doc


@pytest.mark.asyncio
class TestReportEndpoints:
    """Tests for report endpoints."""

    async def test_last_days_dense_window(self, app_client, mock_db):
        """Test the trailing window has one point per day, oldest first."""
        mock_db["profiles"].find_one.return_value = {"user_id": "user123", "hourly_rate": 30}
        mock_db["time_entries"].cursor.to_list.return_value = [
            completed_doc(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 11, 0)),
        ]

        response = await app_client.get("/reports/last-days")

        assert response.status_code == 200
        data = response.json()
        assert len(data["points"]) == 7
        assert data["points"][0]["day_key"] == "2024-02-27"
        assert data["points"][-1]["day_key"] == "2024-03-04"
        assert data["points"][-1]["minutes"] == 120
        assert data["total_minutes"] == 120
        assert data["total_earnings"] == 60.0
        assert data["sessions"] == 1
        assert data["currency"] == "USD"

    async def test_day_summaries(self, app_client, mock_db):
        """Test per-day summaries omit empty days."""
        mock_db["time_entries"].cursor.to_list.return_value = [
            completed_doc(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 11, 0)),
            completed_doc(datetime(2024, 3, 4, 13, 0), datetime(2024, 3, 4, 14, 0)),
        ]

        response = await app_client.get("/reports/days")

        assert response.status_code == 200
        data = response.json()
        assert list(data) == ["2024-03-04"]
        assert data["2024-03-04"]["minutes"] == 180
        assert data["2024-03-04"]["sessions"] == 2

    async def test_work_weeks(self, app_client, mock_db):
        """Test a Sunday entry lands in the preceding work week."""
        mock_db["time_entries"].cursor.to_list.return_value = [
            completed_doc(datetime(2024, 3, 10, 10, 0), datetime(2024, 3, 10, 11, 0)),
            completed_doc(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 10, 0)),
        ]

        response = await app_client.get("/reports/weeks")

        assert response.status_code == 200
        weeks = response.json()
        assert len(weeks) == 1
        assert weeks[0]["start_date"] == "2024-03-04T00:00:00"
        assert weeks[0]["total_minutes"] == 120

    async def test_calendar_month(self, app_client):
        """Test the calendar grid for a month starting on Wednesday."""
        response = await app_client.get("/reports/calendar", params={"month": "2023-11"})

        assert response.status_code == 200
        data = response.json()
        assert data["month"] == "2023-11"
        assert len(data["cells"]) == 35
        assert data["cells"][0]["date"] is None
        assert data["cells"][2]["key"] == "2023-11-1"

    async def test_calendar_invalid_month_falls_back(self, app_client):
        """Test an unparsable month shows the current one."""
        response = await app_client.get("/reports/calendar", params={"month": "garbage"})

        assert response.status_code == 200
        assert response.json()["month"] == "2024-03"

    async def test_export_requires_fields(self, app_client):
        """Test exporting with no fields selected."""
        response = await app_client.post(
            "/reports/export",
            json={"start_date": "2024-03-01", "end_date": "2024-03-31", "fields": []},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Select at least one field for export."

    async def test_export_sections(self, app_client, mock_db):
        """Test exporting a range produces one section per work week."""
        mock_db["time_entries"].cursor.to_list.return_value = [
            completed_doc(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 17, 0)),
        ]

        response = await app_client.post(
            "/reports/export",
            json={"start_date": "2024-03-01", "end_date": "2024-03-31", "fields": ["duration", "date"]},
        )

        assert response.status_code == 200
        sections = response.json()
        assert len(sections) == 1
        assert sections[0]["total_minutes"] == 480
        assert sections[0]["rows"] == [["Date: Mar 4, 2024", "Duration: 8h 0m"]]

    async def test_export_csv_empty(self, app_client):
        """Test CSV export with nothing logged."""
        response = await app_client.get("/reports/export.csv")

        assert response.status_code == 400

    async def test_export_csv(self, app_client, mock_db):
        """Test CSV export returns an attachment."""
        mock_db["time_entries"].cursor.to_list.return_value = [
            completed_doc(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 17, 0)),
        ]

        response = await app_client.get("/reports/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "timesheet-2024-03-04.csv" in response.headers["content-disposition"]
        assert "Week Total" in response.text


@pytest.mark.asyncio
class TestHealth:
    """Tests for the service health endpoints."""

    async def test_health(self, app_client):
        response = await app_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
