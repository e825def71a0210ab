"""Domain models."""

from .calendar import Calendar
from .event import CalendarEvent, Visibility
from .result import OperationResult

__all__ = ["Calendar", "CalendarEvent", "OperationResult", "Visibility"]
