"""Custom exceptions for the calendar engine.

Only structural errors (a malformed request reaching the core) are raised.
Expected domain conditions are reported through ``OperationResult``.
"""


class CalendarEngineError(Exception):
    """Base exception for calendar engine errors."""


class InvalidRequestError(CalendarEngineError, ValueError):
    """Raised when a request is malformed (caller bug, not a domain outcome)."""


class UnknownTimeZoneError(CalendarEngineError, KeyError):
    """Raised when a time-zone identifier is not in the zone database."""

    def __str__(self) -> str:
        return f"Unknown time zone: {self.args[0]!r}" if self.args else "Unknown time zone"


class CalendarCodecError(CalendarEngineError):
    """Raised when reading or writing a calendar file fails."""
