"""Event editing."""

from .edit_engine import EditEngine, EventProperty

__all__ = ["EditEngine", "EventProperty"]
