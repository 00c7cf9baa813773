"""Exception hierarchy for the calendar core."""

from __future__ import annotations


class CalendarError(Exception):
    """Base exception for all calendar errors."""


class InvalidArgumentError(CalendarError, ValueError):
    """A value was rejected by validation.

    Raised for malformed recurrence parameters, unknown edit properties,
    missing required fields, unknown timezone ids and malformed commands.
    """


class DuplicateNameError(CalendarError):
    """A calendar with the requested name is already registered.

    Attributes:
        name: The conflicting calendar name.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Calendar name already exists: {name}")
        self.name = name


class NotFoundError(CalendarError, LookupError):
    """A calendar or event could not be found."""


class LastCalendarError(CalendarError):
    """Attempted to delete the only remaining calendar."""

    def __init__(self, message: str = "Cannot delete the last calendar") -> None:
        super().__init__(message)
