"""Recurrence expansion."""

from .recurrence import RecurringSeries, Weekday

__all__ = ["RecurringSeries", "Weekday"]
