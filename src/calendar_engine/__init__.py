"""In-memory calendar engine: event storage, recurrence and multi-calendar management."""

from .copier import EventCopier
from .editing.edit_engine import EditEngine, EventProperty
from .manager import CalendarManager
from .models.calendar import Calendar
from .models.event import CalendarEvent, Visibility
from .models.result import OperationResult
from .scheduling.recurrence import RecurringSeries, Weekday
from .storage.event_storage import EventStorage
from .storage.registry import CalendarRegistry

__version__ = "0.1.0"

__all__ = [
    "Calendar",
    "CalendarEvent",
    "CalendarManager",
    "CalendarRegistry",
    "EditEngine",
    "EventCopier",
    "EventProperty",
    "EventStorage",
    "OperationResult",
    "RecurringSeries",
    "Visibility",
    "Weekday",
]
