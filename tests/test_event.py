"""Tests for the CalendarEvent model."""

from datetime import date, datetime, timedelta

import pytest
import pytz
from pydantic import ValidationError

from calendar_engine.models.event import CalendarEvent, Visibility

from conftest import make_event


class TestCalendarEventValidation:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            make_event("Bad", "2025-03-01T11:00", "2025-03-01T10:00")

    def test_zero_length_event_is_allowed(self):
        event = make_event("Reminder", "2025-03-01T10:00", "2025-03-01T10:00")
        assert event.duration == timedelta(0)

    def test_empty_subject_is_rejected(self):
        with pytest.raises(ValidationError):
            make_event("", "2025-03-01T10:00", "2025-03-01T11:00")

    def test_aware_timestamps_are_rejected(self):
        with pytest.raises(ValidationError):
            CalendarEvent(
                subject="Call",
                start=datetime(2025, 3, 1, 10, tzinfo=pytz.utc),
                end=datetime(2025, 3, 1, 11, tzinfo=pytz.utc),
            )

    def test_optional_text_defaults(self):
        event = CalendarEvent(
            subject="Call",
            start=datetime(2025, 3, 1, 10),
            end=datetime(2025, 3, 1, 11),
            description=None,
            location=None,
        )
        assert event.description == ""
        assert event.location == ""
        assert event.visibility is Visibility.UNSET
        assert event.is_recurring is False
        assert event.series_id is None


class TestVisibility:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("public", Visibility.PUBLIC),
            ("PRIVATE", Visibility.PRIVATE),
            ("", Visibility.UNSET),
            (None, Visibility.UNSET),
        ],
    )
    def test_from_value(self, value, expected):
        assert Visibility.from_value(value) is expected

    def test_unknown_value_raises(self):
        with pytest.raises(ValueError):
            Visibility.from_value("secret")


class TestCalendarEventBehaviour:
    def test_conflicts_are_symmetric_and_half_open(self, meeting):
        overlapping = make_event("Other", "2025-03-01T10:30", "2025-03-01T11:30")
        adjacent = make_event("Next", "2025-03-01T11:00", "2025-03-01T12:00")

        assert meeting.conflicts_with(overlapping)
        assert overlapping.conflicts_with(meeting)
        assert not meeting.conflicts_with(adjacent)
        assert not adjacent.conflicts_with(meeting)

    def test_all_day_factory(self):
        event = CalendarEvent.all_day("Holiday", date(2025, 12, 25))

        assert event.start == datetime(2025, 12, 25, 0, 0)
        assert event.end == datetime(2025, 12, 25, 23, 59)
        assert event.is_all_day

    def test_full_day_span_is_all_day(self):
        event = make_event("Offsite", "2025-03-03T00:00", "2025-03-04T00:00")
        assert event.is_all_day

    def test_timed_event_is_not_all_day(self, meeting):
        assert not meeting.is_all_day

    def test_copy_with_is_detached(self, meeting):
        copy = meeting.copy_with(subject="Copy")

        assert copy is not meeting
        assert copy.subject == "Copy"
        assert meeting.subject == "Meeting"
        assert copy.start == meeting.start

    def test_copy_with_revalidates(self, meeting):
        with pytest.raises(ValidationError):
            meeting.copy_with(end=datetime(2025, 3, 1, 9, 0))

    def test_matches_ignores_subject_case(self, meeting):
        assert meeting.matches("meeting", datetime(2025, 3, 1, 10, 0))
        assert not meeting.matches("meeting", datetime(2025, 3, 1, 10, 30))
