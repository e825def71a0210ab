"""Calendar metadata model."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr, field_validator
from pytz.tzinfo import BaseTzInfo

from ..utils.date_utils import is_valid_timezone, resolve_timezone
from ..utils.exceptions import CalendarEngineError
from .event import CalendarEvent

if TYPE_CHECKING:
    from ..storage.event_storage import EventStorage
    from ..storage.registry import CalendarRegistry


class Calendar(BaseModel):
    """
    A named container of events with one time zone.

    The events themselves live in the registry partition named after the
    calendar; ``storage`` always resolves through the current name.
    """

    name: str = Field(min_length=1)
    timezone: str

    # CalendarRegistry; bound by the manager
    _registry: Any = PrivateAttr(default=None)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if not is_valid_timezone(value):
            raise ValueError(f"unknown time zone {value!r}")
        return value.strip()

    def bind(self, registry: "CalendarRegistry") -> "Calendar":
        self._registry = registry
        registry.get_or_create(self.name)
        return self

    @property
    def tz(self) -> BaseTzInfo:
        return resolve_timezone(self.timezone)

    @property
    def storage(self) -> "EventStorage":
        if self._registry is None:
            raise CalendarEngineError(f"Calendar '{self.name}' is not bound to a registry")
        storage = self._registry.get(self.name)
        if storage is None:
            raise CalendarEngineError(f"No storage registered for calendar '{self.name}'")
        return storage

    def add_event(self, event: CalendarEvent, auto_decline: bool = False) -> bool:
        return self.storage.add_event(event, auto_decline)

    def find_event(self, subject: str, start: datetime) -> Optional[CalendarEvent]:
        return self.storage.find_event(subject, start)

    def remove_event(self, event: CalendarEvent) -> bool:
        return self.storage.remove_event(event)

    def get_events_on_date(self, day: Union[date, datetime]) -> list[CalendarEvent]:
        return self.storage.get_events_on_date(day)

    def get_events_in_range(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        return self.storage.get_events_in_range(start, end)

    def events_at(self, moment: datetime) -> list[CalendarEvent]:
        return self.storage.events_at(moment)

    def is_busy(self, moment: datetime) -> bool:
        return bool(self.events_at(moment))
