"""Multi-calendar orchestration: calendars, active calendar, rename and re-zone."""

import logging
from datetime import datetime
from typing import Optional

from .editing.edit_engine import EditEngine
from .models.calendar import Calendar
from .models.event import CalendarEvent
from .models.result import OperationResult
from .scheduling.recurrence import RecurringSeries
from .storage.event_storage import EventStorage
from .storage.registry import CalendarRegistry
from .utils.date_utils import ZoneLike, convert_interval, resolve_timezone
from .utils.exceptions import UnknownTimeZoneError

logger = logging.getLogger(__name__)

EDITABLE_CALENDAR_PROPERTIES = ("name", "timezone")


class CalendarManager:
    """
    Owns the calendars, their registry partitions and the active calendar.

    Every name in ``calendars`` has exactly one partition in the registry
    and vice versa. Not thread-safe: serialize all access externally.
    """

    def __init__(
        self,
        registry: Optional[CalendarRegistry] = None,
        auto_decline: bool = False,
        reject_conflicting_edits: bool = True,
    ):
        """
        Initialize calendar manager.

        Args:
            registry: Partition registry (a new empty one by default)
            auto_decline: Decline new events that overlap stored ones
            reject_conflicting_edits: Passed to every ``EditEngine`` handed out
        """
        self.registry = registry if registry is not None else CalendarRegistry()
        self.auto_decline = auto_decline
        self.reject_conflicting_edits = reject_conflicting_edits
        self.calendars: dict[str, Calendar] = {}
        self.active: Optional[Calendar] = None

    # --- Calendar lifecycle ---

    def create_calendar(self, name: str, timezone: str) -> OperationResult:
        """Create an empty calendar. Does not change the active calendar."""
        if not name or not name.strip():
            return self._fail("Calendar name cannot be empty")
        if name in self.calendars:
            return self._fail(f"A calendar with the name '{name}' already exists.")
        try:
            resolve_timezone(timezone)
        except UnknownTimeZoneError as e:
            return self._fail(str(e))

        calendar = Calendar(name=name, timezone=timezone)
        self.registry.put(name, EventStorage())
        calendar.bind(self.registry)
        self.calendars[name] = calendar
        logger.info(f"Created calendar '{name}' ({calendar.timezone})")
        return OperationResult.ok(f"Calendar '{name}' created.", data=calendar)

    def use_calendar(self, name: str) -> OperationResult:
        if not name or not name.strip():
            return self._fail("Calendar name cannot be empty")
        calendar = self.calendars.get(name)
        if calendar is None:
            return self._fail(f"Calendar '{name}' does not exist.")
        self.active = calendar
        logger.info(f"Using calendar '{name}'")
        return OperationResult.ok(f"Using calendar '{name}'.", data=calendar)

    def edit_calendar(self, name: str, property_name: str, value: str) -> OperationResult:
        """
        Change a calendar's ``name`` or ``timezone``.

        A time-zone change rewrites every stored event to the same instant in
        the new zone. Any failure leaves the calendar unchanged.
        """
        calendar = self.calendars.get(name)
        if calendar is None:
            return self._fail(f"Calendar with name {name} does not exist.")

        prop = (property_name or "").strip().lower()
        if prop == "name":
            return self._rename_calendar(calendar, value)
        if prop == "timezone":
            return self._rezone_calendar(calendar, value)
        return self._fail(
            f"Invalid property: {property_name}. "
            f"Expected one of: {', '.join(EDITABLE_CALENDAR_PROPERTIES)}"
        )

    def _rename_calendar(self, calendar: Calendar, new_name: str) -> OperationResult:
        old_name = calendar.name
        if not new_name or not new_name.strip():
            return self._fail("Calendar name cannot be empty")
        if new_name == old_name:
            return OperationResult.ok(f"Calendar '{old_name}' unchanged.", data=calendar)
        if new_name in self.calendars:
            return self._fail(f"Calendar with name {new_name} already exists.")

        moved = self.registry.rename(old_name, new_name)
        if not moved:
            return self._fail(moved.message or f"Could not rename calendar '{old_name}'")

        calendar.name = new_name
        del self.calendars[old_name]
        self.calendars[new_name] = calendar
        # ``active`` holds the same Calendar object, so it follows the rename.
        logger.info(f"Renamed calendar '{old_name}' to '{new_name}'")
        return OperationResult.ok(f"Calendar '{old_name}' renamed to '{new_name}'.", data=calendar)

    def _rezone_calendar(self, calendar: Calendar, zone_name: str) -> OperationResult:
        try:
            new_zone = resolve_timezone(zone_name)
        except UnknownTimeZoneError as e:
            return self._fail(str(e))

        old_zone = calendar.tz
        storage = calendar.storage
        if not storage:
            calendar.timezone = new_zone.zone
            message = f"No events found in calendar '{calendar.name}'. Timezone updated."
            logger.warning(message)
            return OperationResult.ok(message, data=calendar)

        changes = [
            (event, *convert_interval(event.start, event.end, old_zone, new_zone))
            for event in storage
        ]
        count = storage.rekey_all(changes)
        calendar.timezone = new_zone.zone
        logger.info(
            f"Moved calendar '{calendar.name}' from {old_zone.zone} to {new_zone.zone} "
            f"({count} events rewritten)"
        )
        return OperationResult.ok(
            f"Timezone of '{calendar.name}' updated to {new_zone.zone}.", data=calendar
        )

    # --- Accessors ---

    def get_calendar(self, name: Optional[str]) -> Optional[Calendar]:
        if name is None:
            return None
        return self.calendars.get(name)

    def get_current_calendar(self) -> Optional[Calendar]:
        return self.active

    def get_current_storage(self) -> Optional[EventStorage]:
        return self.active.storage if self.active else None

    def calendar_names(self) -> list[str]:
        return list(self.calendars)

    def resolve(self, name: Optional[str] = None) -> Optional[Calendar]:
        """Return the named calendar, or the active one when no name is given."""
        return self.active if name is None else self.calendars.get(name)

    def editor_for(self, name: Optional[str] = None) -> Optional[EditEngine]:
        calendar = self.resolve(name)
        if calendar is None:
            return None
        return EditEngine(calendar.storage, reject_conflicts=self.reject_conflicting_edits)

    # --- Events ---

    def add_event(self, event: CalendarEvent, calendar_name: Optional[str] = None) -> OperationResult:
        calendar = self.resolve(calendar_name)
        if calendar is None:
            return self._missing_calendar(calendar_name)
        if not calendar.add_event(event, self.auto_decline):
            return self._fail(f"Event '{event.subject}' conflicts with another event and is declined.")
        logger.info(f"Created event '{event.subject}' at {event.start} in '{calendar.name}'")
        return OperationResult.ok(f"Event '{event.subject}' created.", data=[event])

    def add_recurring(
        self, series: RecurringSeries, calendar_name: Optional[str] = None
    ) -> OperationResult:
        calendar = self.resolve(calendar_name)
        if calendar is None:
            return self._missing_calendar(calendar_name)
        return series.materialize(calendar.storage, self.auto_decline)

    def show_status(self, moment: datetime, calendar_name: Optional[str] = None) -> OperationResult:
        """Report ``busy`` or ``available`` at ``moment``."""
        calendar = self.resolve(calendar_name)
        if calendar is None:
            return self._missing_calendar(calendar_name)
        status = "busy" if calendar.is_busy(moment) else "available"
        return OperationResult.ok(f"Status at {moment.isoformat()}: {status}", data=status)

    def transfer_events_from_storage(
        self,
        source: Optional[EventStorage],
        source_timezone: Optional[ZoneLike] = None,
    ) -> OperationResult:
        """
        Copy every event of ``source`` into the active calendar.

        Args:
            source: Storage to copy from (left untouched)
            source_timezone: Zone the source times are expressed in. When
                given, copies keep the same instant; otherwise the wall-clock
                values are copied as they are.
        """
        if self.active is None:
            return self._fail("No calendar in use.")
        if source is None:
            return self._fail("No source storage to transfer from.")

        target = self.active
        target_zone = target.tz
        from_zone = None
        if source_timezone is not None:
            try:
                from_zone = resolve_timezone(source_timezone)
            except UnknownTimeZoneError as e:
                return self._fail(str(e))

        copies = []
        for event in source:
            if from_zone is not None and from_zone.zone != target_zone.zone:
                start, end = convert_interval(event.start, event.end, from_zone, target_zone)
                copies.append(event.copy_with(start=start, end=end))
            else:
                copies.append(event.copy_with())

        added = [event for event in copies if target.add_event(event, self.auto_decline)]
        logger.info(f"Transferred {len(added)} of {len(copies)} events into '{target.name}'")
        return OperationResult.ok(f"Transferred {len(added)} events.", data=added)

    # --- Helpers ---

    def _missing_calendar(self, name: Optional[str]) -> OperationResult:
        if name is None:
            return self._fail("No calendar in use.")
        return self._fail(f"Calendar '{name}' does not exist.")

    @staticmethod
    def _fail(message: str) -> OperationResult:
        logger.warning(message)
        return OperationResult.fail(message)
