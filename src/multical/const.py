"""Constants for the calendar core."""

from datetime import timedelta
from typing import Final

__version__ = "0.1.0"

DEFAULT_CALENDAR_NAME: Final = "default"
DEFAULT_TIMEZONE: Final = "America/New_York"

# All-day events occupy one calendar day from their start.
ALL_DAY_DURATION: Final = timedelta(days=1)

DEFAULT_AUTO_DECLINE: Final = True
DEFAULT_RECURRENCE_HORIZON_DAYS: Final = 365
DEFAULT_EXPORT_HORIZON_YEARS: Final = 100

# Weekday tokens accepted by --weekdays, mapped to datetime.weekday() numbers.
WEEKDAY_TOKENS: Final = {
    "M": 0,
    "T": 1,
    "W": 2,
    "R": 3,
    "F": 4,
    "S": 5,
    "U": 6,
}

# Command and printer wire formats
INPUT_DATETIME_FORMAT: Final = "%Y-%m-%d %H:%M"
INPUT_DATE_FORMAT: Final = "%Y-%m-%d"
PRINT_DATETIME_FORMAT: Final = "%m/%d/%Y %H:%M"

# CSV export formats
EXPORT_DATE_FORMAT: Final = "%m/%d/%Y"
EXPORT_TIME_FORMAT: Final = "%H:%M:%S"
EXPORT_ALL_DAY_START_TIME: Final = "00:00"
EXPORT_HEADER: Final = (
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "Location",
    "Description",
    "Private",
    "ZoneID",
)

ENV_PREFIX: Final = "MULTICAL_"

CONF_DEFAULT_CALENDAR_NAME: Final = "default_calendar_name"
CONF_DEFAULT_TIMEZONE: Final = "default_timezone"
CONF_AUTO_DECLINE: Final = "auto_decline"
CONF_RECURRENCE_HORIZON_DAYS: Final = "recurrence_horizon_days"
CONF_EXPORT_HORIZON_YEARS: Final = "export_horizon_years"
