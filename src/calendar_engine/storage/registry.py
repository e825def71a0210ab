"""Name-keyed registry of per-calendar event partitions."""

import logging
from typing import Optional

from ..models.event import CalendarEvent
from ..models.result import OperationResult
from .event_storage import EventStorage

logger = logging.getLogger(__name__)


class CalendarRegistry:
    """
    Mapping from calendar name (case-sensitive) to its ``EventStorage``.

    Not thread-safe: all access must be serialized by the caller.
    """

    def __init__(self) -> None:
        self._partitions: dict[str, EventStorage] = {}

    def put(self, name: str, storage: EventStorage) -> None:
        """Register or replace the partition for ``name``."""
        self._partitions[name] = storage

    def get(self, name: str) -> Optional[EventStorage]:
        return self._partitions.get(name)

    def get_or_create(self, name: str) -> EventStorage:
        storage = self._partitions.get(name)
        if storage is None:
            storage = self._partitions[name] = EventStorage()
        return storage

    def remove(self, name: str) -> Optional[EventStorage]:
        return self._partitions.pop(name, None)

    def rename(self, old_name: str, new_name: str) -> OperationResult:
        """
        Move the partition of ``old_name`` under ``new_name``.

        If ``new_name`` already has a partition the events are merged into a
        freshly built partition which then replaces both keys; nothing is
        moved if the merge cannot be built.
        """
        source = self._partitions.get(old_name)
        if source is None:
            return OperationResult.fail(f"No storage registered for calendar '{old_name}'")
        if old_name == new_name:
            return OperationResult.ok()

        existing = self._partitions.get(new_name)
        if existing is None:
            replacement = source
        else:
            replacement = EventStorage(list(existing) + list(source))

        self._partitions[new_name] = replacement
        del self._partitions[old_name]
        logger.debug(f"Moved {len(source)} events from '{old_name}' to '{new_name}'")
        return OperationResult.ok()

    def events_for(self, name: str) -> list[CalendarEvent]:
        """Flattened, chronologically ordered events of one partition."""
        storage = self._partitions.get(name)
        return list(storage) if storage is not None else []

    def names(self) -> list[str]:
        return list(self._partitions)

    def __contains__(self, name: object) -> bool:
        return name in self._partitions

    def __len__(self) -> int:
        return len(self._partitions)
