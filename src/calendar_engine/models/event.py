"""Calendar event data model."""

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Visibility(str, Enum):
    """Event visibility (the ``event_type`` property)."""

    PUBLIC = "public"
    PRIVATE = "private"
    UNSET = "unset"

    @classmethod
    def from_value(cls, value: Any) -> "Visibility":
        if isinstance(value, cls):
            return value
        text = (value or "").strip().lower() if isinstance(value, str) else value
        if not text:
            return cls.UNSET
        return cls(text)


class CalendarEvent(BaseModel):
    """
    One scheduled occurrence.

    Times are naive wall-clock values relative to the owning calendar's zone.
    Identity for lookups is ``(subject, start)``; the storage index is keyed
    by ``start``, so start changes must go through ``EventStorage.reschedule``.
    """

    subject: str = Field(min_length=1)
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    visibility: Visibility = Visibility.UNSET

    # Recurrence membership
    is_recurring: bool = False
    series_id: Optional[str] = None

    @field_validator("description", "location", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("visibility", mode="before")
    @classmethod
    def _coerce_visibility(cls, value: Any) -> Any:
        return Visibility.from_value(value)

    @field_validator("start", "end")
    @classmethod
    def _require_naive(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            raise ValueError("event timestamps must be naive wall-clock values")
        return value

    @model_validator(mode="after")
    def _check_order(self) -> "CalendarEvent":
        if self.end < self.start:
            raise ValueError(
                f"end ({self.end.isoformat()}) is before start ({self.start.isoformat()})"
            )
        return self

    @classmethod
    def all_day(cls, subject: str, day: date, **fields: Any) -> "CalendarEvent":
        """Create an all-day event (00:00-23:59)."""
        return cls(
            subject=subject,
            start=datetime.combine(day, time.min),
            end=datetime.combine(day, time(23, 59)),
            **fields,
        )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def identity(self) -> tuple[str, datetime]:
        return self.subject.lower(), self.start

    @property
    def is_all_day(self) -> bool:
        if self.start.time() != time.min:
            return False
        if self.end == self.start + timedelta(days=1):
            return True
        return self.end.date() == self.start.date() and self.end.time() == time(23, 59)

    def matches(self, subject: str, start: datetime) -> bool:
        return self.identity == (subject.lower(), start)

    def conflicts_with(self, other: "CalendarEvent") -> bool:
        """Return True if the two ``[start, end)`` intervals overlap."""
        return self.start < other.end and other.start < self.end

    def covers(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def copy_with(self, **changes: Any) -> "CalendarEvent":
        """Return a detached copy with ``changes`` applied and re-validated."""
        data = self.model_dump()
        data.update(changes)
        return CalendarEvent(**data)

    def __str__(self) -> str:
        return f"Event: {self.subject}, Start: {self.start.isoformat()}, End: {self.end.isoformat()}"
