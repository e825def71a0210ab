"""Shared fixtures for calendar engine tests."""

from datetime import datetime

import pytest

from calendar_engine.manager import CalendarManager
from calendar_engine.models.event import CalendarEvent
from calendar_engine.storage.event_storage import EventStorage


def make_event(subject: str, start: str, end: str, **fields) -> CalendarEvent:
    return CalendarEvent(
        subject=subject,
        start=datetime.fromisoformat(start),
        end=datetime.fromisoformat(end),
        **fields,
    )


@pytest.fixture
def storage() -> EventStorage:
    return EventStorage()


@pytest.fixture
def meeting() -> CalendarEvent:
    return make_event("Meeting", "2025-03-01T10:00", "2025-03-01T11:00")


@pytest.fixture
def manager() -> CalendarManager:
    return CalendarManager()


@pytest.fixture
def work_manager(manager: CalendarManager) -> CalendarManager:
    """Manager with an active 'Work' calendar in America/New_York."""
    assert manager.create_calendar("Work", "America/New_York")
    assert manager.use_calendar("Work")
    return manager
