"""Registry of named calendars with a current calendar.

A ``CalendarManager`` is the session object: every command acts on one
instance, so independent sessions (and tests) never share state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo

from ._zones import in_zone, require_aware, resolve_zone, start_of_day
from .calendar import Calendar
from .config import Settings
from .exceptions import DuplicateNameError, InvalidArgumentError, LastCalendarError, NotFoundError
from .models import Event

_LOGGER = logging.getLogger(__name__)


@dataclass
class CopyReport:
    """Outcome of a batch copy; declined events never stop the batch."""

    target: str
    copied: list[Event] = field(default_factory=list)
    declined: list[Event] = field(default_factory=list)

    @property
    def selected(self) -> int:
        return len(self.copied) + len(self.declined)


class CalendarManager:
    """Keeps at least one calendar and exactly one current calendar.

    Every mutating operation validates before changing anything, so a
    failure leaves the registry as it was.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        default = Calendar(
            self._settings.default_calendar_name, self._settings.default_timezone
        )
        self._calendars: dict[str, Calendar] = {default.name: default}
        self._current = default

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def current(self) -> Calendar:
        return self._current

    def get_current_calendar(self) -> Calendar:
        return self._current

    def names(self) -> list[str]:
        return list(self._calendars)

    def __contains__(self, name: object) -> bool:
        return name in self._calendars

    def __len__(self) -> int:
        return len(self._calendars)

    # ------------------------------------------------------------------ #
    #  Registry
    # ------------------------------------------------------------------ #

    def create_calendar(self, name: str, timezone: str | tzinfo) -> Calendar:
        """Register a new, empty calendar.

        Raises:
            DuplicateNameError: If ``name`` is taken.
            InvalidArgumentError: On an empty name or unknown zone.
        """
        if not name:
            raise InvalidArgumentError("Calendar name cannot be empty")
        if name in self._calendars:
            raise DuplicateNameError(name)
        calendar = Calendar(name, resolve_zone(timezone))
        self._calendars[name] = calendar
        _LOGGER.debug("Created %r", calendar)
        return calendar

    def get_calendar(self, name: str) -> Calendar:
        try:
            return self._calendars[name]
        except KeyError:
            raise NotFoundError(f"Calendar not found: {name}") from None

    def set_current(self, name: str) -> Calendar:
        self._current = self.get_calendar(name)
        return self._current

    def rename_calendar(self, old: str, new: str) -> Calendar:
        """Rename a calendar; the current calendar is tracked by identity."""
        if not new:
            raise InvalidArgumentError("Calendar name cannot be empty")
        if new in self._calendars:
            raise DuplicateNameError(new)
        calendar = self.get_calendar(old)
        del self._calendars[old]
        calendar.name = new
        self._calendars[new] = calendar
        _LOGGER.debug("Renamed calendar %s to %s", old, new)
        return calendar

    def set_timezone(self, name: str, timezone: str | tzinfo) -> Calendar:
        """Move a calendar, and its stored events, to another zone."""
        calendar = self.get_calendar(name)
        calendar.timezone = resolve_zone(timezone)
        return calendar

    def delete_calendar(self, name: str) -> None:
        """Remove a calendar.

        If it was current, some remaining calendar becomes current; which one
        is unspecified.

        Raises:
            LastCalendarError: If it is the only calendar.
            NotFoundError: If no calendar has that name.
        """
        if len(self._calendars) <= 1:
            raise LastCalendarError()
        calendar = self.get_calendar(name)
        del self._calendars[name]
        if calendar is self._current:
            self._current = next(iter(self._calendars.values()))
            _LOGGER.debug("Deleted current calendar %s; now using %s", name, self._current.name)

    # ------------------------------------------------------------------ #
    #  Copying
    # ------------------------------------------------------------------ #

    def copy_event(
        self,
        subject: str,
        source_start: datetime,
        target_name: str,
        target_start: datetime,
    ) -> bool:
        """Copy the current calendar's event at ``source_start`` to another calendar.

        The copy starts at ``target_start`` expressed in the target's zone and
        keeps the source's duration. Returns ``False`` when the target
        declined it because of a conflict.

        Raises:
            NotFoundError: If the target calendar or the source event is missing.
        """
        target = self.get_calendar(target_name)
        source = self._current.get_event_at(source_start)
        if source is None or source.subject != subject:
            raise NotFoundError(f"Event not found: {subject} at {source_start}")

        new_start = in_zone(require_aware(target_start, "Target start"), target.timezone)
        return target.add_event(
            source.moved_to(new_start), auto_decline=self._settings.auto_decline
        )

    def copy_events_on(self, day: date, target_name: str, target_day: date) -> CopyReport:
        """Copy every event of ``day`` to ``target_day`` in another calendar."""
        return self.copy_events_between(day, day, target_name, target_day)

    def copy_events_between(
        self,
        first_day: date,
        last_day: date,
        target_name: str,
        target_first_day: date,
    ) -> CopyReport:
        """Copy the events of ``first_day`` through ``last_day`` to another calendar.

        Each event moves by the day offset between ``first_day`` and
        ``target_first_day`` in the source zone and is then expressed in the
        target zone. All-day events stay all-day at midnight of their new day
        in the target zone.
        """
        if last_day < first_day:
            raise InvalidArgumentError("Copy range ends before it starts")
        target = self.get_calendar(target_name)
        source_zone = self._current.timezone
        window_start = start_of_day(first_day, source_zone)
        window_end = start_of_day(last_day + timedelta(days=1), source_zone)
        offset = target_first_day - first_day

        report = CopyReport(target=target.name)
        # Opening the window a second early keeps midnight starts inside the
        # strict range query.
        for event in self._current.get_events_in_range(
            window_start - timedelta(seconds=1), window_end
        ):
            local_start = in_zone(event.start, source_zone)
            new_day = local_start.date() + offset
            shifted = in_zone(local_start + offset, target.timezone)
            copy = event.moved_to(
                shifted, all_day_start=start_of_day(new_day, target.timezone)
            )
            if target.add_event(copy, auto_decline=self._settings.auto_decline):
                report.copied.append(copy)
            else:
                _LOGGER.debug("Copy of %r declined by %s", event, target.name)
                report.declined.append(event)
        return report
