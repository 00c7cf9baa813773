"""Free-text command layer on top of a CalendarManager."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from dateutil.relativedelta import relativedelta

from ._zones import localize, start_of_day
from .const import INPUT_DATE_FORMAT, INPUT_DATETIME_FORMAT
from .exceptions import CalendarError, InvalidArgumentError
from .exporter import export_calendar
from .manager import CalendarManager, CopyReport
from .models import Event, RecurringEvent, Visibility
from .view import TextView

_LOGGER = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')

# Window used by "edit event ... from <time>" to find later events.
_EDIT_LOOKAHEAD = relativedelta(years=100)


def tokenize(line: str) -> list[str]:
    """Split a command line on whitespace; double quotes group words."""
    return [
        quoted if quoted is not None else bare
        for quoted, bare in (m.groups() for m in _TOKEN_RE.finditer(line))
    ]


def parse_datetime(text: str, zone: tzinfo) -> datetime:
    """Parse ``yyyy-MM-dd HH:mm`` as a wall-clock time in ``zone``."""
    try:
        return localize(datetime.strptime(text, INPUT_DATETIME_FORMAT), zone)
    except ValueError as err:
        raise InvalidArgumentError(f"Invalid date-time format: {text}") from err


def parse_date(text: str) -> date:
    """Parse ``yyyy-MM-dd``."""
    try:
        return datetime.strptime(text, INPUT_DATE_FORMAT).date()
    except ValueError as err:
        raise InvalidArgumentError(f"Invalid date format: {text}") from err


class _Tokens:
    """Cursor over the tokens of one command."""

    def __init__(self, tokens: list[str]) -> None:
        self._tokens = tokens
        self._index = 0

    @property
    def done(self) -> bool:
        return self._index >= len(self._tokens)

    def peek(self) -> str | None:
        return None if self.done else self._tokens[self._index]

    def take(self, what: str) -> str:
        if self.done:
            raise InvalidArgumentError(f"Missing {what}")
        token = self._tokens[self._index]
        self._index += 1
        return token

    def expect(self, *words: str) -> str:
        token = self.take(" or ".join(repr(w) for w in words))
        if token.lower() not in words:
            raise InvalidArgumentError(
                f"Expected {' or '.join(repr(w) for w in words)}, got {token!r}"
            )
        return token.lower()

    def accept(self, word: str) -> bool:
        if not self.done and self._tokens[self._index].lower() == word:
            self._index += 1
            return True
        return False

    def take_datetime(self, zone: tzinfo) -> datetime:
        day = self.take("date")
        clock = self.take("time")
        return parse_datetime(f"{day} {clock}", zone)

    def take_date(self) -> date:
        return parse_date(self.take("date"))

    def finish(self) -> None:
        if not self.done:
            raise InvalidArgumentError(f"Unexpected argument: {self.peek()}")


class CalendarController:
    """Translates command lines into CalendarManager calls.

    ``process_command`` never raises for a bad command: errors are reported
    through the view and processing continues.
    """

    def __init__(self, manager: CalendarManager, view: TextView | None = None) -> None:
        self._manager = manager
        self._view = view or TextView()
        self._handlers: dict[str, Callable[[_Tokens], None]] = {
            "create": self._handle_create,
            "edit": self._handle_edit,
            "use": self._handle_use,
            "copy": self._handle_copy,
            "print": self._handle_print,
            "export": self._handle_export,
            "show": self._handle_show,
        }

    @property
    def manager(self) -> CalendarManager:
        return self._manager

    def process_command(self, line: str) -> bool:
        """Run one command. Returns False only for ``exit``."""
        tokens = tokenize(line)
        if not tokens:
            return True
        keyword = tokens[0].lower()
        if keyword == "exit":
            return False
        try:
            handler = self._handlers.get(keyword)
            if handler is None:
                raise InvalidArgumentError(f"Unknown command: {tokens[0]}")
            handler(_Tokens(tokens[1:]))
        except CalendarError as err:
            _LOGGER.warning("Command failed: %s (%s)", line, err)
            self._view.display(f"Invalid command: {line} - {err}")
        return True

    # ------------------------------------------------------------------ #
    #  Calendars
    # ------------------------------------------------------------------ #

    def _handle_use(self, args: _Tokens) -> None:
        args.expect("calendar")
        args.expect("--name")
        name = args.take("calendar name")
        args.finish()
        self._manager.set_current(name)
        self._view.display(f"Switched to calendar '{name}'.")

    def _create_calendar(self, args: _Tokens) -> None:
        args.expect("--name")
        name = args.take("calendar name")
        args.expect("--timezone")
        zone = args.take("timezone")
        args.finish()
        self._manager.create_calendar(name, zone)
        self._view.display(f"Calendar '{name}' created.")

    def _edit_calendar(self, args: _Tokens) -> None:
        args.expect("--name")
        name = args.take("calendar name")
        args.expect("--property")
        prop = args.expect("name", "timezone")
        value = args.take("new value")
        args.finish()
        if prop == "name":
            self._manager.rename_calendar(name, value)
            self._view.display(f"Calendar renamed to '{value}'.")
        else:
            self._manager.set_timezone(name, value)
            self._view.display(f"Timezone updated for '{name}'.")

    # ------------------------------------------------------------------ #
    #  Events
    # ------------------------------------------------------------------ #

    def _handle_create(self, args: _Tokens) -> None:
        if args.accept("calendar"):
            self._create_calendar(args)
            return
        recurring = args.accept("recurring")
        args.expect("event")
        subject = args.take("event name")
        calendar = self._manager.current
        zone = calendar.timezone

        if args.expect("on", "from") == "on":
            start = start_of_day(args.take_date(), zone)
            end = None
        else:
            start = args.take_datetime(zone)
            end = args.take_datetime(zone) if args.accept("to") else None

        options = self._parse_event_options(args, zone, recurring=recurring)
        visibility = Visibility.PRIVATE if options.pop("private", False) else Visibility.PUBLIC

        if not recurring:
            event = Event(
                subject, start, end, options.get("location"), options.get("description"),
                visibility,
            )
            if calendar.add_event(event, auto_decline=self._manager.settings.auto_decline):
                self._view.display(f"Event '{subject}' created.")
            else:
                self._view.display("Event declined due to conflict")
            return

        if "weekdays" not in options:
            raise InvalidArgumentError("--weekdays required for recurring events")
        series = RecurringEvent(
            subject, start, end, options.get("location"), options.get("description"),
            visibility,
            weekdays=options["weekdays"],
            occurrence_limit=options.get("occurrences"),
            recurrence_end=options.get("end_date"),
        )
        horizon = None
        if not series.is_bounded:
            horizon = start + timedelta(days=self._manager.settings.recurrence_horizon_days)
        if calendar.add_recurring_event(series, horizon=horizon):
            self._view.display(f"Recurring event '{subject}' created.")
        else:
            self._view.display("Recurring event declined due to conflict")

    def _parse_event_options(
        self, args: _Tokens, zone: tzinfo, *, recurring: bool
    ) -> dict[str, Any]:
        options: dict[str, Any] = {}
        while not args.done:
            flag = args.take("option")
            if flag == "--location":
                options["location"] = args.take("location")
            elif flag == "--description":
                options["description"] = args.take("description")
            elif flag == "--private":
                options["private"] = True
            elif recurring and flag == "--weekdays":
                options["weekdays"] = args.take("weekdays")
            elif recurring and flag == "--occurrences":
                raw = args.take("occurrences")
                try:
                    options["occurrences"] = int(raw)
                except ValueError as err:
                    raise InvalidArgumentError(f"Invalid occurrences: {raw}") from err
            elif recurring and flag == "--end-date":
                options["end_date"] = args.take_datetime(zone)
            else:
                raise InvalidArgumentError(f"Unknown parameter: {flag}")
        return options

    def _handle_edit(self, args: _Tokens) -> None:
        if args.accept("calendar"):
            self._edit_calendar(args)
            return
        args.expect("event", "events")
        prop = args.take("property")
        subject = args.take("event name")
        calendar = self._manager.current
        zone = calendar.timezone
        args.expect("from")
        since = args.take_datetime(zone)
        args.expect("with")
        raw_value = args.take("new value")
        args.finish()

        value: Any = raw_value
        if prop.lower() in ("start", "end"):
            value = parse_datetime(raw_value, zone)

        matches = [
            event
            for event in calendar.get_events_in_range(
                since - timedelta(seconds=1), since + _EDIT_LOOKAHEAD
            )
            if event.subject == subject
        ]
        if not matches:
            self._view.display(f"No events named '{subject}' found.")
            return
        for event in matches:
            try:
                calendar.edit_event_instance(event.start, prop, value)
            except CalendarError as err:
                self._view.display(
                    f"Cannot edit event '{event.subject}' at {event.start.isoformat()}: {err}"
                )
        self._view.display("Events updated where applicable.")

    # ------------------------------------------------------------------ #
    #  Copy
    # ------------------------------------------------------------------ #

    def _handle_copy(self, args: _Tokens) -> None:
        kind = args.expect("event", "events")
        source_zone = self._manager.current.timezone
        if kind == "event":
            subject = args.take("event name")
            args.expect("on")
            source_start = args.take_datetime(source_zone)
            target_name = self._take_target(args)
            target_zone = self._manager.get_calendar(target_name).timezone
            target_start = args.take_datetime(target_zone)
            args.finish()
            if self._manager.copy_event(subject, source_start, target_name, target_start):
                self._view.display(f"Event '{subject}' copied to '{target_name}'.")
            else:
                self._view.display(f"Cannot copy event '{subject}' due to conflict")
            return

        if args.expect("on", "between") == "on":
            day = args.take_date()
            target_name = self._take_target(args)
            target_day = args.take_date()
            args.finish()
            report = self._manager.copy_events_on(day, target_name, target_day)
        else:
            first_day = args.take_date()
            args.expect("and")
            last_day = args.take_date()
            target_name = self._take_target(args)
            target_day = args.take_date()
            args.finish()
            report = self._manager.copy_events_between(
                first_day, last_day, target_name, target_day
            )
        self._report_copy(report)

    @staticmethod
    def _take_target(args: _Tokens) -> str:
        args.expect("--target")
        name = args.take("target calendar")
        args.expect("to")
        return name

    def _report_copy(self, report: CopyReport) -> None:
        for event in report.declined:
            self._view.display(f"Cannot copy event '{event.subject}' due to conflict")
        if report.selected:
            self._view.display(f"Events copied to '{report.target}' where applicable.")
        else:
            self._view.display("No events to copy.")

    # ------------------------------------------------------------------ #
    #  Output
    # ------------------------------------------------------------------ #

    def _handle_print(self, args: _Tokens) -> None:
        args.expect("events")
        calendar = self._manager.current
        zone = calendar.timezone
        if args.expect("on", "from") == "on":
            day_start = start_of_day(args.take_date(), zone)
            range_from = day_start - timedelta(seconds=1)
            range_to = day_start + timedelta(days=1)
        else:
            range_from = args.take_datetime(zone)
            args.expect("to")
            range_to = args.take_datetime(zone)
        args.finish()
        self._view.print_events(calendar.get_events_in_range(range_from, range_to))

    def _handle_export(self, args: _Tokens) -> None:
        args.expect("cal", "calendar")
        filename = args.take("file name")
        args.finish()
        try:
            path = export_calendar(
                self._manager.current,
                filename,
                horizon_years=self._manager.settings.export_horizon_years,
            )
        except OSError as err:
            raise InvalidArgumentError(f"Export failed: {err}") from err
        self._view.display(f"Exported to: {path}")

    def _handle_show(self, args: _Tokens) -> None:
        args.expect("status")
        args.expect("on")
        calendar = self._manager.current
        at = args.take_datetime(calendar.timezone)
        args.finish()
        self._view.display("Busy" if calendar.is_busy(at) else "Available")
