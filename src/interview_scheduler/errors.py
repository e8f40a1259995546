"""Error taxonomy for the scheduling flow."""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every error raised by the scheduler."""


class ValidationError(SchedulingError):
    """A required selection is missing or malformed. Nothing was written."""


class PersistenceError(SchedulingError):
    """The interview record could not be written."""


class DuplicateInterviewError(PersistenceError):
    """An interview already exists for this application at this time."""


class IntegrationWarning(SchedulingError):
    """An optional integration (calendar, meeting, e-mail, chat) failed.

    Never fatal: the runner logs it and reports it next to the result.
    """

    def __init__(self, source: str, message: str) -> None:
        super().__init__(message)
        self.source = source
        self.message = message

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


class CalendarNotConnected(IntegrationWarning):
    """The staff member has no usable calendar credential."""

    def __init__(self, message: str = "Google Calendar not connected") -> None:
        super().__init__("calendar", message)
