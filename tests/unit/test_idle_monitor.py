"""Tests for IdleMonitor."""
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from worktracker.exceptions import ValidationError
from worktracker.models.time_entry import EntryStatus
from worktracker.services.idle_monitor import IdleMonitor
from worktracker.utils.clock import FixedClock


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 4, 9, 0))


class TestIdleMonitor:
    """Tests for idle signalling."""

    def test_fires_once_per_idle_period(self, clock, make_entry):
        handler = MagicMock()
        monitor = IdleMonitor(10, clock, on_idle=handler)
        monitor.bind(make_entry())

        clock.advance(minutes=9, seconds=59)
        assert monitor.poll() is False

        clock.advance(seconds=1)
        assert monitor.poll() is True

        clock.advance(minutes=30)
        assert monitor.poll() is False
        assert handler.call_count == 1

    def test_activity_rearms(self, clock, make_entry):
        handler = MagicMock()
        monitor = IdleMonitor(10, clock, on_idle=handler)
        monitor.bind(make_entry())

        clock.advance(minutes=10)
        assert monitor.poll() is True

        monitor.record_activity()
        assert monitor.signal_raised is False
        assert monitor.poll() is False

        clock.advance(minutes=10)
        assert monitor.poll() is True
        assert monitor.poll() is False
        assert handler.call_count == 2

    def test_handler_receives_entry_and_idle_span(self, clock, make_entry):
        handler = MagicMock()
        entry = make_entry()
        monitor = IdleMonitor(10, clock, on_idle=handler)
        monitor.bind(entry)

        clock.advance(minutes=12)
        monitor.poll()

        called_entry, idle_for = handler.call_args.args
        assert called_entry is entry
        assert idle_for.total_seconds() == 12 * 60

    def test_silent_without_active_entry(self, clock, make_entry):
        monitor = IdleMonitor(10, clock)
        clock.advance(minutes=30)
        assert monitor.poll() is False

        monitor.bind(make_entry(status=EntryStatus.ON_BREAK, break_started_at=clock.now()))
        assert monitor.poll() is False

        monitor.bind(make_entry(status=EntryStatus.COMPLETED, end_time=clock.now()))
        assert monitor.poll() is False

    def test_leaving_active_clears_signal(self, clock, make_entry):
        monitor = IdleMonitor(10, clock)
        monitor.bind(make_entry())
        clock.advance(minutes=10)
        assert monitor.poll() is True

        monitor.bind(make_entry(status=EntryStatus.ON_BREAK, break_started_at=clock.now()))
        assert monitor.signal_raised is False

    def test_threshold_change(self, clock, make_entry):
        monitor = IdleMonitor(10, clock)
        monitor.bind(make_entry())
        monitor.set_idle_minutes(2)

        clock.advance(minutes=2)
        assert monitor.poll() is True

    def test_threshold_minimum(self, clock):
        with pytest.raises(ValidationError):
            IdleMonitor(0, clock)

        monitor = IdleMonitor(1, clock)
        with pytest.raises(ValidationError):
            monitor.set_idle_minutes(0)

    def test_break_end_starts_fresh_idle_period(self, clock, make_entry):
        monitor = IdleMonitor(10, clock)
        monitor.bind(make_entry())
        clock.advance(minutes=9)

        monitor.bind(make_entry(status=EntryStatus.ON_BREAK, break_started_at=clock.now()))
        clock.advance(minutes=20)

        monitor.bind(make_entry())
        assert monitor.last_activity == clock.now()
        assert monitor.poll() is False

        clock.advance(minutes=10)
        assert monitor.poll() is True

    def test_new_entry_starts_fresh_idle_period(self, clock, make_entry):
        monitor = IdleMonitor(10, clock)
        monitor.bind(make_entry())
        clock.advance(minutes=30)

        monitor.bind(make_entry(id="entry2", start_time=clock.now()))
        assert monitor.poll() is False

        clock.advance(minutes=10)
        assert monitor.poll() is True

    def test_rebinding_same_entry_keeps_idle_period(self, clock, make_entry):
        monitor = IdleMonitor(10, clock)
        monitor.bind(make_entry())
        clock.advance(minutes=10)

        monitor.bind(make_entry(note="edited"))
        assert monitor.poll() is True
