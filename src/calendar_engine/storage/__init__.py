"""In-memory event storage."""

from .event_storage import EventStorage
from .registry import CalendarRegistry

__all__ = ["CalendarRegistry", "EventStorage"]
