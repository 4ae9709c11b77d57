"""Tests for worked-time arithmetic."""
from datetime import datetime

from worktracker.models.time_entry import EntryStatus
from worktracker.services.durations import (
    display_minutes,
    has_missing_break_start,
    sum_display_minutes,
    worked_milliseconds,
    worked_minutes,
)


class TestWorkedMilliseconds:
    """Tests for worked_milliseconds."""

    def test_running_entry_measured_to_now(self, make_entry):
        entry = make_entry()
        now = datetime(2024, 3, 4, 10, 30)

        assert worked_milliseconds(entry, now) == 90 * 60_000

    def test_completed_breaks_subtracted(self, make_entry):
        entry = make_entry(
            end_time=datetime(2024, 3, 4, 17, 0),
            status=EntryStatus.COMPLETED,
            break_minutes=30,
        )

        assert worked_minutes(entry, datetime(2024, 3, 5, 8, 0)) == 450

    def test_running_break_subtracted_live(self, make_entry):
        entry = make_entry(
            status=EntryStatus.ON_BREAK,
            break_started_at=datetime(2024, 3, 4, 12, 0),
        )
        now = datetime(2024, 3, 4, 12, 20)

        # 200 minutes elapsed, 20 of them on break
        assert worked_minutes(entry, now) == 180

    def test_missing_break_start_counts_no_running_break(self, make_entry):
        entry = make_entry(status=EntryStatus.ON_BREAK, break_started_at=None)
        now = datetime(2024, 3, 4, 10, 0)

        assert has_missing_break_start(entry)
        assert worked_minutes(entry, now) == 60

    def test_clock_skew_never_negative(self, make_entry):
        entry = make_entry()

        assert worked_milliseconds(entry, datetime(2024, 3, 4, 8, 0)) == 0

    def test_break_longer_than_entry_never_negative(self, make_entry):
        entry = make_entry(
            end_time=datetime(2024, 3, 4, 10, 0),
            status=EntryStatus.COMPLETED,
            break_minutes=500,
        )

        assert worked_milliseconds(entry, datetime(2024, 3, 4, 10, 0)) == 0

    def test_break_start_in_future_never_adds_time(self, make_entry):
        entry = make_entry(
            status=EntryStatus.ON_BREAK,
            break_started_at=datetime(2024, 3, 4, 11, 0),
        )

        assert worked_minutes(entry, datetime(2024, 3, 4, 10, 0)) == 60

    def test_minutes_are_floored(self, make_entry):
        entry = make_entry()
        now = datetime(2024, 3, 4, 9, 0, 59, 999000)

        assert worked_milliseconds(entry, now) == 59_999
        assert worked_minutes(entry, now) == 0


class TestDisplayMinutes:
    """Tests for display_minutes."""

    def test_completed_entry_never_below_snapshot(self, make_entry):
        entry = make_entry(
            end_time=datetime(2024, 3, 4, 17, 0),
            status=EntryStatus.COMPLETED,
            break_minutes=30,
            total_minutes=500,
        )

        assert display_minutes(entry, datetime(2024, 3, 4, 17, 0)) == 500

    def test_completed_entry_uses_worked_when_snapshot_stale(self, make_entry):
        entry = make_entry(
            end_time=datetime(2024, 3, 4, 17, 0),
            status=EntryStatus.COMPLETED,
            total_minutes=0,
        )

        assert display_minutes(entry, datetime(2024, 3, 4, 17, 0)) == 480

    def test_running_entry_ignores_snapshot(self, make_entry):
        entry = make_entry(total_minutes=999)

        assert display_minutes(entry, datetime(2024, 3, 4, 9, 45)) == 45

    def test_sum_display_minutes(self, make_entry):
        entries = [
            make_entry(
                end_time=datetime(2024, 3, 4, 10, 0),
                status=EntryStatus.COMPLETED,
                total_minutes=60,
            ),
            make_entry(id="entry2", start_time=datetime(2024, 3, 4, 11, 0)),
        ]

        assert sum_display_minutes(entries, datetime(2024, 3, 4, 11, 30)) == 90
