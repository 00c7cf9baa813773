"""CSV export of a calendar."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from dateutil.relativedelta import relativedelta

from ._zones import in_zone, zone_id
from .calendar import Calendar
from .const import (
    DEFAULT_EXPORT_HORIZON_YEARS,
    EXPORT_ALL_DAY_START_TIME,
    EXPORT_DATE_FORMAT,
    EXPORT_HEADER,
    EXPORT_TIME_FORMAT,
)
from .models import Event

_LOGGER = logging.getLogger(__name__)


def render_row(event: Event, calendar: Calendar) -> list[str]:
    """One CSV row, with times expressed in the calendar's zone."""
    zone = calendar.timezone
    start = in_zone(event.start, zone)
    start_date = start.strftime(EXPORT_DATE_FORMAT)
    if event.end is None:
        start_time = EXPORT_ALL_DAY_START_TIME
        end_date = start_date
        end_time = ""
    else:
        end = in_zone(event.end, zone)
        start_time = start.strftime(EXPORT_TIME_FORMAT)
        end_date = end.strftime(EXPORT_DATE_FORMAT)
        end_time = end.strftime(EXPORT_TIME_FORMAT)
    return [
        event.subject,
        start_date,
        start_time,
        end_date,
        end_time,
        event.location or "",
        event.description or "",
        "No" if event.is_public else "Yes",
        zone_id(zone),
    ]


def render_rows(
    calendar: Calendar,
    *,
    horizon_years: int = DEFAULT_EXPORT_HORIZON_YEARS,
    now: datetime | None = None,
) -> Iterator[list[str]]:
    """Rows for every event within ``horizon_years`` of ``now``."""
    now = now or datetime.now(tz=calendar.timezone)
    span = relativedelta(years=horizon_years)
    for event in calendar.get_events_in_range(now - span, now + span):
        yield render_row(event, calendar)


def export_calendar(
    calendar: Calendar,
    path: str | Path,
    *,
    horizon_years: int = DEFAULT_EXPORT_HORIZON_YEARS,
    now: datetime | None = None,
) -> Path:
    """Write the calendar to ``path`` as CSV and return the absolute path.

    Fields containing a comma, quote or newline are quoted with embedded
    quotes doubled.
    """
    target = Path(path).absolute()
    target.parent.mkdir(parents=True, exist_ok=True)
    rows = 0
    with target.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for row in render_rows(calendar, horizon_years=horizon_years, now=now):
            writer.writerow(row)
            rows += 1
    _LOGGER.debug("Exported %d event(s) from %s to %s", rows, calendar.name, target)
    return target
