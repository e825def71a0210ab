"""Recurring event series: a generator of concrete occurrences."""

import logging
import uuid
from datetime import date, datetime, time
from enum import IntEnum
from typing import Any, Optional, Union

from dateutil.rrule import DAILY, rrule, weekday as rrule_weekday
from pydantic import BaseModel, Field, field_validator, model_validator

from ..models.event import CalendarEvent
from ..models.result import OperationResult
from ..storage.event_storage import EventStorage

logger = logging.getLogger(__name__)


class Weekday(IntEnum):
    """Weekday selector, Monday = 0 (matches ``date.weekday()``)."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_code(cls, value: Any) -> "Weekday":
        """
        Parse a weekday from an int, a full/short name, or a one-letter code.

        One-letter codes follow the command language: M T W R F S U.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().upper()
        if text in _LETTER_CODES:
            return _LETTER_CODES[text]
        for member in cls:
            if member.name == text or member.name[:3] == text:
                return member
        raise ValueError(f"unknown weekday {value!r}")

    @classmethod
    def parse_set(cls, codes: str) -> frozenset["Weekday"]:
        """Parse a compact code string such as ``"MWF"``."""
        return frozenset(cls.from_code(letter) for letter in codes.strip())

    def to_rrule(self) -> rrule_weekday:
        return rrule_weekday(int(self))


_LETTER_CODES = {
    "M": Weekday.MONDAY,
    "T": Weekday.TUESDAY,
    "W": Weekday.WEDNESDAY,
    "R": Weekday.THURSDAY,
    "F": Weekday.FRIDAY,
    "S": Weekday.SATURDAY,
    "U": Weekday.SUNDAY,
}


class RecurringSeries(BaseModel):
    """
    A base event repeated on selected weekdays until a bound is reached.

    The series is a generator: occurrences are ordinary ``CalendarEvent``
    objects flagged ``is_recurring`` and carrying the series id. Changing
    the bound does not touch occurrences that were already stored.
    """

    base: CalendarEvent
    weekdays: frozenset[Weekday]
    occurrences: Optional[int] = None
    until: Optional[Union[datetime, date]] = None
    series_id: str = Field(default_factory=lambda: uuid.uuid4().hex)

    @field_validator("weekdays", mode="before")
    @classmethod
    def _parse_weekdays(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Weekday.parse_set(value)
        return frozenset(Weekday.from_code(item) for item in value)

    @model_validator(mode="after")
    def _check_pattern(self) -> "RecurringSeries":
        if not self.weekdays:
            raise ValueError("a recurring series needs at least one weekday")
        if (self.occurrences is None) == (self.until is None):
            raise ValueError("exactly one of 'occurrences' or 'until' must be given")
        return self

    def set_occurrences(self, occurrences: int) -> None:
        """Rebind the series to a count bound."""
        self.occurrences = occurrences
        self.until = None

    def set_until(self, until: Union[datetime, date]) -> None:
        """Rebind the series to an end-date bound."""
        self.until = until
        self.occurrences = None

    def _rule(self) -> rrule:
        options: dict[str, Any] = {
            "dtstart": self.base.start,
            "byweekday": [day.to_rrule() for day in sorted(self.weekdays)],
        }
        if self.occurrences is not None:
            options["count"] = self.occurrences
        elif isinstance(self.until, datetime):
            options["until"] = self.until
        else:
            # Inclusive end date: any start time on that day qualifies.
            options["until"] = datetime.combine(self.until, time.max)
        return rrule(DAILY, **options)

    def generate_occurrences(self) -> list[CalendarEvent]:
        """
        Expand the series into concrete events, in chronological order.

        Occurrences keep the base time of day and duration. A count bound
        below one yields nothing.
        """
        if self.occurrences is not None and self.occurrences < 1:
            return []

        duration = self.base.duration
        events: list[CalendarEvent] = []
        for start in self._rule():
            end = start + duration
            if isinstance(self.until, datetime) and end >= self.until:
                break
            events.append(
                self.base.copy_with(
                    start=start,
                    end=end,
                    is_recurring=True,
                    series_id=self.series_id,
                )
            )
        return events

    def materialize(self, storage: EventStorage, auto_decline: bool = False) -> OperationResult:
        """
        Write every occurrence into ``storage``.

        With ``auto_decline`` a single conflicting occurrence declines the
        whole series and nothing is written.
        """
        events = self.generate_occurrences()
        if not events:
            logger.info(f"No occurrences found for '{self.base.subject}'")
            return OperationResult.ok("No occurrences found.", data=[])

        if auto_decline:
            for event in events:
                if storage.has_conflict(event):
                    message = f"Recurring event declined due to conflict: {event}"
                    logger.warning(message)
                    return OperationResult.fail(message)

        for event in events:
            storage.add_event(event)
        logger.info(f"Added {len(events)} occurrences of '{self.base.subject}'")
        return OperationResult.ok(f"Added {len(events)} occurrences.", data=events)
