"""Per-calendar event index keyed by start timestamp."""

import logging
from bisect import bisect_left, bisect_right, insort
from collections.abc import Iterable, Iterator
from datetime import date, datetime
from typing import Optional, Union

from ..models.event import CalendarEvent
from ..utils.date_utils import day_window
from ..utils.exceptions import InvalidRequestError

logger = logging.getLogger(__name__)


class EventStorage:
    """
    Ordered mapping from start timestamp to the events starting then.

    Every stored event sits in the bucket of its current ``start``; the only
    ways to change a stored event's start are ``reschedule`` and
    ``rekey_all``. Events are tracked by object identity so two equal-looking
    events remain distinct entries.

    Not thread-safe: all access must be serialized by the caller.
    """

    def __init__(self, events: Optional[Iterable[CalendarEvent]] = None):
        self._keys: list[datetime] = []
        self._buckets: dict[datetime, list[CalendarEvent]] = {}
        for event in events or ():
            self._insert(event)

    # --- Index maintenance ---

    def _insert(self, event: CalendarEvent) -> None:
        bucket = self._buckets.get(event.start)
        if bucket is None:
            bucket = self._buckets[event.start] = []
            insort(self._keys, event.start)
        bucket.append(event)

    def _detach(self, event: CalendarEvent) -> bool:
        bucket = self._buckets.get(event.start)
        if not bucket:
            return False
        for index, stored in enumerate(bucket):
            if stored is event:
                del bucket[index]
                break
        else:
            return False
        if not bucket:
            del self._buckets[event.start]
            del self._keys[bisect_left(self._keys, event.start)]
        return True

    # --- Mutation ---

    def add_event(self, event: CalendarEvent, auto_decline: bool = False) -> bool:
        """
        Store an event under its start timestamp.

        Args:
            event: Event to store
            auto_decline: Decline the event if it overlaps a stored event

        Returns:
            True if stored, False if declined because of a conflict
        """
        if auto_decline and self.has_conflict(event):
            logger.info(f"Declined '{event.subject}' at {event.start}: conflicts with another event")
            return False
        self._insert(event)
        return True

    def remove_event(self, event: CalendarEvent) -> bool:
        """Remove one event; drops its bucket when emptied."""
        return self._detach(event)

    def reschedule(
        self,
        event: CalendarEvent,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> None:
        """
        Move a stored event to a new interval, re-keying it in one step.

        Raises:
            InvalidRequestError: If the event is not stored here or the new
                interval ends before it starts
        """
        new_start = event.start if start is None else start
        new_end = event.end if end is None else end
        if new_end < new_start:
            raise InvalidRequestError(
                f"End {new_end.isoformat()} is before start {new_start.isoformat()}"
            )
        if event not in self:
            raise InvalidRequestError(f"Event '{event.subject}' is not in this storage")
        self._detach(event)
        event.start = new_start
        event.end = new_end
        self._insert(event)

    def rekey_all(self, changes: Iterable[tuple[CalendarEvent, datetime, datetime]]) -> int:
        """
        Apply many interval changes at once.

        The replacement index is built completely before any event is
        touched, so a rejected change leaves the storage as it was.

        Args:
            changes: ``(event, new_start, new_end)`` triples

        Returns:
            Number of events changed

        Raises:
            InvalidRequestError: If any event is missing or any interval is inverted
        """
        planned: dict[int, tuple[CalendarEvent, datetime, datetime]] = {}
        for event, new_start, new_end in changes:
            if new_end < new_start:
                raise InvalidRequestError(
                    f"End {new_end.isoformat()} is before start {new_start.isoformat()} "
                    f"for '{event.subject}'"
                )
            if event not in self:
                raise InvalidRequestError(f"Event '{event.subject}' is not in this storage")
            planned[id(event)] = (event, new_start, new_end)

        keys: list[datetime] = []
        buckets: dict[datetime, list[CalendarEvent]] = {}
        for event in self:
            key = planned[id(event)][1] if id(event) in planned else event.start
            bucket = buckets.get(key)
            if bucket is None:
                bucket = buckets[key] = []
                insort(keys, key)
            bucket.append(event)

        for event, new_start, new_end in planned.values():
            event.start = new_start
            event.end = new_end
        self._keys = keys
        self._buckets = buckets
        return len(planned)

    # --- Lookup ---

    def find_event(self, subject: str, start: datetime) -> Optional[CalendarEvent]:
        """Find an event by subject (case-insensitive) and exact start."""
        for event in self._buckets.get(start, ()):
            if event.matches(subject, start):
                return event
        return None

    def find_by_subject(self, subject: str, recurring_only: bool = False) -> list[CalendarEvent]:
        return [
            event
            for event in self
            if event.subject.lower() == subject.lower()
            and (event.is_recurring or not recurring_only)
        ]

    def find_series(self, series_id: str) -> list[CalendarEvent]:
        return [event for event in self if event.series_id == series_id]

    def get_events_on_date(self, day: Union[date, datetime]) -> list[CalendarEvent]:
        """Events whose interval intersects the 24-hour window of ``day``."""
        window_start, window_end = day_window(day)
        return [
            event
            for key in self._keys[: bisect_left(self._keys, window_end)]
            for event in self._buckets[key]
            if event.end > window_start or event.start >= window_start
        ]

    def get_events_in_range(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Events whose interval touches ``[start, end]``."""
        if end < start:
            return []
        return [
            event
            for key in self._keys[: bisect_right(self._keys, end)]
            for event in self._buckets[key]
            if event.end > start or event.start >= start
        ]

    def events_at(self, moment: datetime) -> list[CalendarEvent]:
        """Events in progress at ``moment``."""
        return [
            event
            for key in self._keys[: bisect_right(self._keys, moment)]
            for event in self._buckets[key]
            if event.covers(moment)
        ]

    def get_all_events(self) -> dict[datetime, tuple[CalendarEvent, ...]]:
        """Snapshot of the whole index, ordered by start timestamp."""
        return {key: tuple(self._buckets[key]) for key in self._keys}

    # --- Conflicts ---

    def conflicts_for(
        self, event: CalendarEvent, ignore: Iterable[CalendarEvent] = ()
    ) -> list[CalendarEvent]:
        """Stored events overlapping ``event`` (excluding it and ``ignore``)."""
        skipped = {id(item) for item in ignore}
        skipped.add(id(event))
        return [
            other
            for key in self._keys[: bisect_left(self._keys, event.end)]
            for other in self._buckets[key]
            if id(other) not in skipped and other.conflicts_with(event)
        ]

    def has_conflict(self, event: CalendarEvent, ignore: Iterable[CalendarEvent] = ()) -> bool:
        return bool(self.conflicts_for(event, ignore))

    # --- Container protocol ---

    def __iter__(self) -> Iterator[CalendarEvent]:
        for key in list(self._keys):
            yield from list(self._buckets[key])

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __contains__(self, event: object) -> bool:
        if not isinstance(event, CalendarEvent):
            return False
        return any(stored is event for stored in self._buckets.get(event.start, ()))

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __repr__(self) -> str:
        return f"EventStorage(events={len(self)})"
