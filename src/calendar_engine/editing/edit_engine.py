"""Validated property edits on single events and recurring groups."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union

from ..models.event import CalendarEvent, Visibility
from ..models.result import OperationResult
from ..storage.event_storage import EventStorage
from ..utils.date_utils import format_timestamp, parse_timestamp
from ..utils.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)


class EventProperty(str, Enum):
    """Editable event properties."""

    SUBJECT = "subject"
    DESCRIPTION = "description"
    LOCATION = "location"
    EVENT_TYPE = "event_type"
    START = "start"
    END = "end"

    @classmethod
    def from_name(cls, name: Union[str, "EventProperty"]) -> "EventProperty":
        if isinstance(name, cls):
            return name
        if not name:
            raise InvalidRequestError("Property name cannot be empty")
        try:
            return cls(str(name).strip().lower())
        except ValueError as e:
            raise InvalidRequestError(f"Invalid property name: {name}") from e

    @property
    def is_timestamp(self) -> bool:
        return self in (EventProperty.START, EventProperty.END)


@dataclass
class _PlannedEdit:
    event: CalendarEvent
    start: datetime
    end: datetime


class EditEngine:
    """
    Apply property changes to events stored in one ``EventStorage``.

    Start/end changes re-key the storage through ``EventStorage.reschedule``.
    """

    def __init__(self, storage: EventStorage, reject_conflicts: bool = True):
        """
        Initialize edit engine.

        Args:
            storage: Partition holding the events to edit
            reject_conflicts: Refuse time edits that overlap other events
        """
        self.storage = storage
        self.reject_conflicts = reject_conflicts

    def execute_edit(
        self,
        event: CalendarEvent,
        property_name: Union[str, EventProperty],
        new_value: Any,
    ) -> OperationResult:
        """
        Edit one event.

        Args:
            event: Event to change
            property_name: One of ``EventProperty``
            new_value: New value (datetime or ``YYYY-MM-DDTHH:MM`` text for times)

        Returns:
            OperationResult; on failure the event is unchanged

        Raises:
            InvalidRequestError: If the property or value is malformed
        """
        prop = EventProperty.from_name(property_name)
        value = self._coerce(prop, new_value)

        if prop.is_timestamp:
            planned = self._plan_time_change(event, prop, value)
            if isinstance(planned, OperationResult):
                return planned
            conflict = self._find_conflict([planned], ignore=[event])
            if conflict is not None:
                return conflict
            self._apply_time_change(planned)
        else:
            self._apply_attribute(event, prop, value)

        message = f"Edited event: {event.subject} - Changed: {prop.value} to {self._describe(value)}"
        logger.info(message)
        return OperationResult.ok(message, data=[event])

    def execute_multiple_edits(
        self,
        events: Sequence[CalendarEvent],
        property_name: Union[str, EventProperty],
        new_value: Any,
    ) -> OperationResult:
        """
        Edit every event of a recurring group.

        All targets must be recurring occurrences; otherwise nothing is
        changed. Every member is validated before any member is mutated.
        """
        prop = EventProperty.from_name(property_name)
        value = self._coerce(prop, new_value)
        targets = list(events)

        if not targets:
            return self._reject("No events found to edit")
        one_off = [event for event in targets if not event.is_recurring]
        if one_off:
            return self._reject(
                f"Cannot edit all occurrences: '{one_off[0].subject}' at "
                f"{format_timestamp(one_off[0].start)} is not a recurring event"
            )

        if prop.is_timestamp:
            plans: list[_PlannedEdit] = []
            for event in targets:
                planned = self._plan_time_change(event, prop, value)
                if isinstance(planned, OperationResult):
                    return planned
                plans.append(planned)
            conflict = self._find_conflict(plans, ignore=targets)
            if conflict is not None:
                return conflict
            for planned in plans:
                self._apply_time_change(planned)
        else:
            for event in targets:
                self._apply_attribute(event, prop, value)

        message = f"Successfully edited {len(targets)} events."
        logger.info(message)
        return OperationResult.ok(message, data=targets)

    # --- Validation ---

    @staticmethod
    def _coerce(prop: EventProperty, value: Any) -> Any:
        if prop.is_timestamp:
            return parse_timestamp(value)
        if prop is EventProperty.EVENT_TYPE:
            try:
                return Visibility.from_value(value)
            except ValueError as e:
                raise InvalidRequestError(f"Invalid event type: {value!r}") from e
        if value is None:
            raise InvalidRequestError(f"A value is required for '{prop.value}'")
        return str(value)

    def _plan_time_change(self, event: CalendarEvent, prop: EventProperty, value: datetime):
        if prop is EventProperty.START:
            if value >= event.end:
                return self._reject(
                    f"Start time ({format_timestamp(value)}) must be before "
                    f"end time ({format_timestamp(event.end)})"
                )
            return _PlannedEdit(event, value, event.end)
        if value <= event.start:
            return self._reject(
                f"End time ({format_timestamp(value)}) must be after "
                f"start time ({format_timestamp(event.start)})"
            )
        return _PlannedEdit(event, event.start, value)

    def _find_conflict(self, plans: list[_PlannedEdit], ignore: Sequence[CalendarEvent]):
        if not self.reject_conflicts:
            return None
        for planned in plans:
            candidate = planned.event.copy_with(start=planned.start, end=planned.end)
            if self.storage.has_conflict(candidate, ignore=ignore):
                return self._reject(
                    f"Edit would cause scheduling conflict for event: "
                    f"{planned.event.subject} at {format_timestamp(planned.start)}"
                )
        return None

    @staticmethod
    def _reject(message: str) -> OperationResult:
        logger.warning(message)
        return OperationResult.fail(message)

    # --- Mutation ---

    def _apply_time_change(self, planned: _PlannedEdit) -> None:
        if planned.event in self.storage:
            self.storage.reschedule(planned.event, planned.start, planned.end)
        else:
            planned.event.start = planned.start
            planned.event.end = planned.end

    @staticmethod
    def _apply_attribute(event: CalendarEvent, prop: EventProperty, value: Any) -> None:
        if prop is EventProperty.SUBJECT:
            event.subject = value
        elif prop is EventProperty.DESCRIPTION:
            event.description = value
        elif prop is EventProperty.LOCATION:
            event.location = value
        elif prop is EventProperty.EVENT_TYPE:
            event.visibility = value
        else:
            raise InvalidRequestError(f"Unsupported property: {prop.value}")

    @staticmethod
    def _describe(value: Any) -> str:
        if isinstance(value, datetime):
            return format_timestamp(value)
        if isinstance(value, Visibility):
            return value.value
        return str(value)
