"""Copy events from the active calendar into another calendar."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from .manager import CalendarManager
from .models.calendar import Calendar
from .models.event import CalendarEvent
from .models.result import OperationResult
from .utils.date_utils import convert_interval

logger = logging.getLogger(__name__)


class EventCopier:
    """Copies single events, whole days, or date ranges between calendars."""

    def __init__(self, manager: CalendarManager):
        self.manager = manager

    def copy_event(
        self,
        subject: str,
        start: datetime,
        target_calendar: str,
        target_start: datetime,
    ) -> OperationResult:
        """
        Copy one event of the active calendar.

        ``target_start`` is wall-clock time in the target calendar; the copy
        keeps the original duration.
        """
        source = self.manager.get_current_calendar()
        if source is None:
            return self._fail("Error: No calendar selected.")
        event = source.find_event(subject, start)
        if event is None:
            return self._fail("Error: Event not found.")
        target = self.manager.get_calendar(target_calendar)
        if target is None:
            return self._fail("Error: Target calendar not found.")
        if target.find_event(subject, target_start) is not None:
            return self._fail("Error: Event exists in target.")

        copy = self._detached(event, target_start, target_start + event.duration)
        if not target.add_event(copy, self.manager.auto_decline):
            return self._fail(f"Error: '{subject}' conflicts with an event in '{target.name}'.")
        logger.info(f"Copied '{subject}' to '{target.name}' at {target_start}")
        return OperationResult.ok("Event copied successfully.", data=[copy])

    def copy_events_on_date(
        self, day: date, target_calendar: str, target_day: date
    ) -> OperationResult:
        """Copy every event on ``day`` to ``target_day`` of another calendar."""
        source = self.manager.get_current_calendar()
        if source is None:
            return self._fail("Error: No calendar selected.")
        target = self.manager.get_calendar(target_calendar)
        if target is None:
            return self._fail("Error: Target calendar not found.")

        events = source.get_events_in_range(
            datetime.combine(day, time.min), datetime.combine(day, time.max)
        )
        if not events:
            return self._fail(f"No events found on {day.isoformat()}.")
        return self._copy_shifted(events, source, target, target_day - day)

    def copy_events_between(
        self,
        start_day: date,
        end_day: date,
        target_calendar: str,
        target_day: date,
    ) -> OperationResult:
        """
        Copy every event between two days (inclusive).

        The earliest copied event lands on ``target_day``; the rest keep
        their spacing.
        """
        source = self.manager.get_current_calendar()
        target = self.manager.get_calendar(target_calendar)
        if source is None:
            return self._fail("Error: No calendar selected.")
        if target is None:
            return self._fail("Error: Target calendar not found.")

        events = source.get_events_in_range(
            datetime.combine(start_day, time.min), datetime.combine(end_day, time.max)
        )
        if not events:
            return self._fail("No events found in range.")
        first_day = min(event.start.date() for event in events)
        return self._copy_shifted(events, source, target, target_day - first_day)

    def _copy_shifted(
        self,
        events: list[CalendarEvent],
        source: Calendar,
        target: Calendar,
        offset: timedelta,
    ) -> OperationResult:
        copies = []
        for event in events:
            start, end = convert_interval(event.start, event.end, source.tz, target.tz)
            copies.append(self._detached(event, start + offset, end + offset))
        added = [copy for copy in copies if target.add_event(copy, self.manager.auto_decline)]
        logger.info(f"Copied {len(added)} events from '{source.name}' to '{target.name}'")
        return OperationResult.ok("Events copied successfully.", data=added)

    @staticmethod
    def _detached(event: CalendarEvent, start: datetime, end: datetime) -> CalendarEvent:
        return event.copy_with(start=start, end=end, is_recurring=False, series_id=None)

    @staticmethod
    def _fail(message: str, data: Optional[list] = None) -> OperationResult:
        logger.warning(message)
        return OperationResult.fail(message, data=data)
