"""A single named, timezone-scoped calendar."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, tzinfo
from typing import Any, Final, Union

from ._zones import instant, localize, require_aware, resolve_zone, zone_id
from .const import ALL_DAY_DURATION, DEFAULT_TIMEZONE
from .exceptions import InvalidArgumentError
from .models import Event, RecurringEvent, Visibility

_LOGGER = logging.getLogger(__name__)

Entry = Union[Event, RecurringEvent]

EDITABLE_PROPERTIES: Final = (
    "subject",
    "name",
    "location",
    "description",
    "start",
    "end",
    "visibility",
    "public",
)

# A generated instance spans at most one calendar day, 25 hours across a DST
# change, so one that can touch a moment starts no earlier than that before it.
# Replacements are found by their own interval and need no look-behind.
_LOOKBEHIND: Final = ALL_DAY_DURATION + timedelta(hours=1)


class Calendar:
    """An ordered collection of single and recurring events.

    Entries keep insertion order. Recurring entries are expanded on demand
    for conflict checks and queries; callers only ever receive Event
    instances from the query methods.
    """

    def __init__(self, name: str, timezone: str | tzinfo = DEFAULT_TIMEZONE) -> None:
        self._name = name
        self._timezone = resolve_zone(timezone)
        self._entries: list[Entry] = []

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def timezone(self) -> tzinfo:
        return self._timezone

    @timezone.setter
    def timezone(self, value: str | tzinfo) -> None:
        """Switch zones; stored entries keep their instants."""
        zone = resolve_zone(value)
        self._timezone = zone
        for entry in self._entries:
            entry.zone = zone

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Calendar({self._name!r}, {zone_id(self._timezone)}, entries={len(self)})"

    # ------------------------------------------------------------------ #
    #  Adding
    # ------------------------------------------------------------------ #

    def add_event(self, event: Event, auto_decline: bool = False) -> bool:
        """Store a single event.

        With ``auto_decline``, the event is declined (``False``, nothing
        stored) when it conflicts with any stored event or any instance of a
        stored recurring event.
        """
        if not isinstance(event, Event):
            raise InvalidArgumentError(
                f"Expected an Event, got {type(event).__name__}; "
                "use add_recurring_event for series"
            )
        if auto_decline:
            clash = self._find_conflict([event])
            if clash is not None:
                _LOGGER.debug("%s: declined %r, conflicts with %r", self._name, event, clash[1])
                return False
        self._entries.append(event)
        _LOGGER.debug("%s: stored %r", self._name, event)
        return True

    def add_recurring_event(
        self,
        recurring: RecurringEvent,
        *,
        horizon: datetime | None = None,
    ) -> bool:
        """Store a series only if none of its instances conflicts.

        The series is expanded over its own bounds, or up to ``horizon``
        when one is given. Nothing is stored when any instance conflicts.

        Raises:
            InvalidArgumentError: If the series is unbounded and no horizon
                was supplied.
        """
        if not isinstance(recurring, RecurringEvent):
            raise InvalidArgumentError(
                f"Expected a RecurringEvent, got {type(recurring).__name__}"
            )
        if horizon is not None:
            instances = recurring.expand(recurring.start, require_aware(horizon, "Horizon"))
        elif recurring.is_bounded:
            instances = recurring.expand()
        else:
            raise InvalidArgumentError(
                f"Recurring event {recurring.subject!r} needs an occurrence limit, "
                "an end date or a horizon"
            )

        clash = self._find_conflict(instances) if instances else None
        if clash is not None:
            _LOGGER.debug(
                "%s: declined series %r, instance %r conflicts with %r",
                self._name, recurring, clash[0], clash[1],
            )
            return False
        self._entries.append(recurring)
        _LOGGER.debug("%s: stored %r (%d instances checked)", self._name, recurring, len(instances))
        return True

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def get_events_in_range(self, range_from: datetime, range_to: datetime) -> list[Event]:
        """Return events strictly inside ``(range_from, range_to)``.

        An event matches when it starts after ``range_from`` and ends before
        ``range_to``; an all-day event matches when its start lies strictly
        between the two. The ``start < range_to`` condition for all-day events
        is stricter than the plain end-before-range check, which would accept
        any all-day event starting after ``range_from``. Results are ordered
        by start instant, ties keeping insertion order.
        """
        low = instant(require_aware(range_from, "Range start"))
        high = instant(require_aware(range_to, "Range end"))

        matches = [
            event
            for event in self._iter_instances(low, high)
            if _within(event, low, high)
        ]
        matches.sort(key=lambda event: instant(event.start))
        return matches

    def is_busy(self, at: datetime) -> bool:
        """Whether an event is in progress at ``at``.

        An event starting or ending exactly at ``at`` does not count.
        """
        moment = instant(require_aware(at, "Time"))
        return any(
            event.occupies(moment)
            for event in self._iter_instances(moment - _LOOKBEHIND, moment)
        )

    def get_event_at(self, start: datetime) -> Event | None:
        """First stored event, or recurring instance, starting exactly at ``start``."""
        moment = instant(require_aware(start, "Start time"))
        for event in self._iter_instances(moment - _LOOKBEHIND, moment + _LOOKBEHIND):
            if instant(event.start) == moment:
                return event
        return None

    # ------------------------------------------------------------------ #
    #  Editing
    # ------------------------------------------------------------------ #

    def edit_event_instance(self, start: datetime, prop: str, value: Any) -> int:
        """Set ``prop`` on every event starting exactly at ``start``.

        A matching recurring instance is edited through an exception on its
        series, leaving the other occurrences untouched. Returns the number
        of events edited; no match is not an error.

        Raises:
            InvalidArgumentError: On an unknown property or a bad value,
                before anything is changed.
        """
        apply = _property_setter(prop, value, self._timezone)
        moment = instant(require_aware(start, "Start time"))

        edited = 0
        for entry in list(self._entries):
            if isinstance(entry, RecurringEvent):
                occurrences = list(
                    entry.iter_occurrences(moment - _LOOKBEHIND, moment + _LOOKBEHIND)
                )
                for generated, instance in occurrences:
                    if instance is None or instant(instance.start) != moment:
                        continue
                    apply(instance)
                    entry.add_exception(generated, instance)
                    edited += 1
            elif instant(entry.start) == moment:
                apply(entry)
                edited += 1

        _LOGGER.debug("%s: set %s on %d event(s) at %s", self._name, prop, edited, start)
        return edited

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def _iter_instances(self, window_start: datetime, window_end: datetime) -> Iterator[Event]:
        """Stored events plus recurring instances generated inside the window.

        Single events are yielded regardless of the window; callers filter.
        """
        for entry in self._entries:
            if isinstance(entry, RecurringEvent):
                yield from entry.expand(window_start, window_end)
            else:
                yield entry

    def _find_conflict(self, candidates: list[Event]) -> tuple[Event, Event] | None:
        window_start = min(instant(c.start) for c in candidates) - _LOOKBEHIND
        window_end = max(instant(c.effective_end) for c in candidates)
        existing = list(self._iter_instances(window_start, window_end))
        for candidate in candidates:
            for other in existing:
                if candidate.conflicts_with(other):
                    return candidate, other
        return None


def _within(event: Event, low: datetime, high: datetime) -> bool:
    start = instant(event.start)
    if not start > low:
        return False
    if event.end is None:
        return start < high
    return instant(event.end) < high


def _property_setter(prop: str, value: Any, zone: tzinfo) -> Callable[[Event], None]:
    """Validate an edit up front and return the function that applies it."""
    name = (prop or "").strip().lower()
    if name not in EDITABLE_PROPERTIES:
        raise InvalidArgumentError(f"Unknown property: {prop}")

    if name in ("subject", "name"):
        return lambda event: setattr(event, "subject", value)
    if name == "location":
        return lambda event: setattr(event, "location", value)
    if name == "description":
        return lambda event: setattr(event, "description", value)
    if name in ("visibility", "public"):
        visibility = Visibility.parse(value)
        return lambda event: setattr(event, "visibility", visibility)

    # start / end
    if value is None:
        if name == "start":
            raise InvalidArgumentError("Start time cannot be null")
        moment = None
    elif isinstance(value, datetime):
        moment = localize(value, zone)
    else:
        raise InvalidArgumentError(f"{name} must be a datetime, got {type(value).__name__}")
    return lambda event: setattr(event, name, moment)

