"""Outcome of a core operation."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class OperationResult:
    """
    Result of a mutating or querying operation.

    Domain failures (duplicate name, unknown calendar, bad ordering...) are
    reported here instead of raised. ``data`` carries an optional payload
    such as the events touched or a status value.
    """

    success: bool
    message: Optional[str] = None
    data: Any = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, message: Optional[str] = None, data: Any = None) -> "OperationResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, data: Any = None) -> "OperationResult":
        return cls(success=False, message=message, data=data)
