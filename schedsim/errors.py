from __future__ import annotations

from typing import Any, Optional


class SchedulingError(Exception):
    """
    Base class for errors raised by the scheduling engines.

    Carries the offending field and value (when known) so front ends can
    tell the user exactly which input to correct.
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.message = message
        self.field = field
        self.value = value
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field and self.value is not None:
            return f"{self.message} ({self.field}={self.value!r})"
        if self.field:
            return f"{self.message} ({self.field})"
        return self.message


class InvalidJobParameters(SchedulingError, ValueError):
    """Raised by add_job for a negative arrival, non-positive burst or duplicate id."""


class InvalidQuantum(SchedulingError, ValueError):
    """Raised when a Round Robin quantum is not strictly positive."""


class EmptyScheduleError(SchedulingError, RuntimeError):
    """Raised when execute() is called on an engine without jobs."""
