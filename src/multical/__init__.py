"""Multi-calendar event and recurrence core."""

from .const import __version__
from .calendar import Calendar
from .config import Settings, settings_from_env
from .controller import CalendarController
from .exceptions import (
    CalendarError,
    DuplicateNameError,
    InvalidArgumentError,
    LastCalendarError,
    NotFoundError,
)
from .exporter import export_calendar
from .manager import CalendarManager, CopyReport
from .models import Event, RecurringEvent, Visibility
from .view import TextView

__all__ = [
    "__version__",
    "Calendar",
    "CalendarController",
    "CalendarManager",
    "CopyReport",
    "Event",
    "RecurringEvent",
    "Settings",
    "TextView",
    "Visibility",
    "export_calendar",
    "settings_from_env",
    "CalendarError",
    "DuplicateNameError",
    "InvalidArgumentError",
    "LastCalendarError",
    "NotFoundError",
]
