"""Data models for calendar entries."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from datetime import datetime, time, timedelta, tzinfo
from typing import Any

from ._zones import in_zone, instant, require_aware, resolve_zone, zone_id
from .const import ALL_DAY_DURATION
from .exceptions import InvalidArgumentError
from .recurrence import build_rule, format_weekdays, parse_weekdays

_LOGGER = logging.getLogger(__name__)


class Visibility(enum.Enum):
    """Event visibility."""

    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def parse(cls, value: Any) -> Visibility:
        """Coerce a Visibility, its name/value, or an ``is_public`` flag.

        Strings ``"true"``/``"false"`` are read as ``is_public`` flags so the
        command layer can pass ``edit event public ... with false``.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.PUBLIC if value else cls.PRIVATE
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("public", "true", "yes"):
                return cls.PUBLIC
            if text in ("private", "false", "no"):
                return cls.PRIVATE
        raise InvalidArgumentError(f"Unknown visibility: {value!r}")


class Event:
    """A single calendar occurrence.

    ``start`` and ``end`` are always expressed in ``zone``; assigning any of
    the three re-expresses both at the same absolute instants. An event with
    no ``end`` is all-day and occupies one calendar day from its start.
    """

    def __init__(
        self,
        subject: str | None,
        start: datetime,
        end: datetime | None = None,
        location: str | None = None,
        description: str | None = None,
        visibility: Visibility | bool | str = Visibility.PUBLIC,
        *,
        zone: str | tzinfo | None = None,
    ) -> None:
        start = require_aware(start, "Start time")
        self._zone = resolve_zone(zone) if zone is not None else start.tzinfo
        self._subject = _coerce_subject(subject)
        self._start = start
        self._end = require_aware(end, "End time") if end is not None else None
        self._location = location
        self._description = description
        self._visibility = Visibility.parse(visibility)
        self._reproject()

    # ------------------------------------------------------------------ #
    #  Fields
    # ------------------------------------------------------------------ #

    @property
    def subject(self) -> str:
        return self._subject

    @subject.setter
    def subject(self, value: str | None) -> None:
        self._subject = _coerce_subject(value)

    @property
    def start(self) -> datetime:
        return self._start

    @start.setter
    def start(self, value: datetime) -> None:
        self._start = require_aware(value, "Start time")
        self._reproject()

    @property
    def end(self) -> datetime | None:
        return self._end

    @end.setter
    def end(self, value: datetime | None) -> None:
        self._end = require_aware(value, "End time") if value is not None else None
        self._reproject()

    @property
    def location(self) -> str | None:
        return self._location

    @location.setter
    def location(self, value: str | None) -> None:
        self._location = value

    @property
    def description(self) -> str | None:
        return self._description

    @description.setter
    def description(self, value: str | None) -> None:
        self._description = value

    @property
    def visibility(self) -> Visibility:
        return self._visibility

    @visibility.setter
    def visibility(self, value: Visibility | bool | str) -> None:
        self._visibility = Visibility.parse(value)

    @property
    def is_public(self) -> bool:
        return self._visibility is Visibility.PUBLIC

    @property
    def zone(self) -> tzinfo:
        return self._zone

    @zone.setter
    def zone(self, value: str | tzinfo) -> None:
        self._zone = resolve_zone(value)
        self._reproject()

    # ------------------------------------------------------------------ #
    #  Derived values
    # ------------------------------------------------------------------ #

    @property
    def is_all_day(self) -> bool:
        return self._end is None

    @property
    def effective_end(self) -> datetime:
        """``end``, or one calendar day after ``start`` for all-day events."""
        if self._end is not None:
            return self._end
        return self._start + ALL_DAY_DURATION

    @property
    def duration(self) -> timedelta:
        """Elapsed time between the start and effective end instants."""
        return instant(self.effective_end) - instant(self._start)

    def conflicts_with(self, other: Event | None) -> bool:
        """Whether the two half-open intervals ``[start, effective_end)`` overlap.

        Back-to-back events do not conflict, and neither does a zero-length
        event, since it has no interior. Inverted events go through the same
        overlap test unchanged.
        """
        if other is None:
            return False
        if not self.duration or not other.duration:
            return False
        return instant(self._start) < instant(other.effective_end) and instant(
            self.effective_end
        ) > instant(other.start)

    def occupies(self, at: datetime) -> bool:
        """Whether ``at`` falls strictly inside ``(start, effective_end)``."""
        moment = instant(at)
        return instant(self._start) < moment < instant(self.effective_end)

    def copy(self) -> Event:
        """Return an independent event with identical fields."""
        return Event(
            self._subject,
            self._start,
            self._end,
            self._location,
            self._description,
            self._visibility,
            zone=self._zone,
        )

    def moved_to(self, start: datetime, *, all_day_start: datetime | None = None) -> Event:
        """Return a copy starting at ``start`` with the same duration.

        The copy is expressed in ``start``'s zone. All-day events stay
        all-day; ``all_day_start`` overrides their start when given.
        """
        start = require_aware(start, "Start time")
        if self._end is None:
            new_start = all_day_start if all_day_start is not None else start
            new_end = None
        else:
            new_start = start
            new_end = in_zone(instant(start) + self.duration, start.tzinfo)
        return Event(
            self._subject,
            new_start,
            new_end,
            self._location,
            self._description,
            self._visibility,
            zone=new_start.tzinfo,
        )

    def _reproject(self) -> None:
        self._start = in_zone(self._start, self._zone)
        if self._end is not None:
            self._end = in_zone(self._end, self._zone)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Event):
            return NotImplemented
        return (
            self._subject == other._subject
            and self._start == other._start
            and self._end == other._end
            and self._location == other._location
            and self._description == other._description
            and self._visibility is other._visibility
            and zone_id(self._zone) == zone_id(other._zone)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        end = self._end.isoformat(timespec="minutes") if self._end else "ALL DAY"
        return (
            f"Event({self._subject!r}, {self._start.isoformat(timespec='minutes')}"
            f" to {end}, {zone_id(self._zone)})"
        )


class RecurringEvent:
    """A template that expands into one Event per matching calendar day.

    The series stops after ``occurrence_limit`` instances or once a
    candidate start passes ``recurrence_end``, whichever is configured. With
    neither, the series is unbounded and may only be expanded over an
    explicit range.

    ``exceptions`` maps an occurrence's generated start instant to a
    replacement Event, or to ``None`` to cancel that occurrence.

    Occurrences are generated on local days of the zone the series was
    created in. Assigning ``zone`` only changes how instances are expressed;
    every occurrence keeps its instant.
    """

    def __init__(
        self,
        subject: str | None,
        start: datetime,
        end: datetime | None = None,
        location: str | None = None,
        description: str | None = None,
        visibility: Visibility | bool | str = Visibility.PUBLIC,
        *,
        weekdays: Any = None,
        occurrence_limit: int | None = None,
        recurrence_end: datetime | None = None,
        zone: str | tzinfo | None = None,
    ) -> None:
        template = Event(
            subject, start, end, location, description, visibility, zone=zone
        )
        _validate_span(template)
        self._template = template
        self._weekday_mask = parse_weekdays(weekdays)
        self._occurrence_limit = _validate_limit(occurrence_limit)
        self._recurrence_end = _validate_recurrence_end(recurrence_end, template)
        self._exceptions: dict[datetime, Event | None] = {}
        self._zone = template.zone

    @classmethod
    def from_event(
        cls,
        event: Event,
        *,
        weekdays: Any = None,
        occurrence_limit: int | None = None,
        recurrence_end: datetime | None = None,
    ) -> RecurringEvent:
        """Build a series that repeats ``event``."""
        return cls(
            event.subject,
            event.start,
            event.end,
            event.location,
            event.description,
            event.visibility,
            weekdays=weekdays,
            occurrence_limit=occurrence_limit,
            recurrence_end=recurrence_end,
            zone=event.zone,
        )

    # ------------------------------------------------------------------ #
    #  Template fields
    # ------------------------------------------------------------------ #

    @property
    def template(self) -> Event:
        return self._template

    @property
    def subject(self) -> str:
        return self._template.subject

    @subject.setter
    def subject(self, value: str | None) -> None:
        self._template.subject = value

    @property
    def start(self) -> datetime:
        return in_zone(self._template.start, self._zone)

    @property
    def end(self) -> datetime | None:
        end = self._template.end
        return in_zone(end, self._zone) if end is not None else None

    @property
    def location(self) -> str | None:
        return self._template.location

    @location.setter
    def location(self, value: str | None) -> None:
        self._template.location = value

    @property
    def description(self) -> str | None:
        return self._template.description

    @description.setter
    def description(self, value: str | None) -> None:
        self._template.description = value

    @property
    def visibility(self) -> Visibility:
        return self._template.visibility

    @visibility.setter
    def visibility(self, value: Visibility | bool | str) -> None:
        self._template.visibility = value

    @property
    def zone(self) -> tzinfo:
        """Zone instances and replacements are expressed in."""
        return self._zone

    @zone.setter
    def zone(self, value: str | tzinfo) -> None:
        self._zone = resolve_zone(value)
        for replacement in self._exceptions.values():
            if replacement is not None:
                replacement.zone = self._zone

    @property
    def rule_zone(self) -> tzinfo:
        """Zone whose local days and wall times generate the occurrences."""
        return self._template.zone

    # ------------------------------------------------------------------ #
    #  Recurrence fields
    # ------------------------------------------------------------------ #

    @property
    def weekday_mask(self) -> frozenset[int]:
        return self._weekday_mask

    @property
    def weekdays(self) -> str:
        """The weekday mask as a token string, e.g. ``"MWF"``."""
        return format_weekdays(self._weekday_mask)

    @property
    def occurrence_limit(self) -> int | None:
        return self._occurrence_limit

    @property
    def recurrence_end(self) -> datetime | None:
        end = self._recurrence_end
        return in_zone(end, self._zone) if end is not None else None

    @property
    def is_bounded(self) -> bool:
        return self._occurrence_limit is not None or self._recurrence_end is not None

    @property
    def exceptions(self) -> dict[datetime, Event | None]:
        """Read-only view of the per-occurrence overrides."""
        return dict(self._exceptions)

    def add_exception(self, at: datetime, replacement: Event | None) -> None:
        """Override (or, with ``None``, cancel) the occurrence starting at ``at``.

        Raises:
            InvalidArgumentError: If the series has no occurrence at ``at``.
        """
        at = require_aware(at, "Occurrence start")
        if not self._has_occurrence(at):
            raise InvalidArgumentError(
                f"No occurrence of {self.subject!r} starts at {at.isoformat()}"
            )
        self._exceptions[instant(at)] = replacement
        _LOGGER.debug(
            "%r: %s occurrence at %s", self, "replaced" if replacement else "cancelled", at
        )

    def remove_exception(self, at: datetime) -> Event | None:
        """Restore the generated occurrence at ``at``; returns the removed override."""
        return self._exceptions.pop(instant(require_aware(at, "Occurrence start")), None)

    def exception_at(self, at: datetime) -> Event | None:
        return self._exceptions.get(instant(at))

    def has_exception(self, at: datetime) -> bool:
        return instant(at) in self._exceptions

    # ------------------------------------------------------------------ #
    #  Expansion
    # ------------------------------------------------------------------ #

    def iter_occurrences(
        self,
        range_start: datetime | None = None,
        range_end: datetime | None = None,
        *,
        include_cancelled: bool = False,
    ) -> Iterator[tuple[datetime, Event | None]]:
        """Yield ``(generated_start, instance)`` pairs in chronological order.

        With a range, occurrences whose generated start lies in
        ``[range_start, range_end]`` are produced, plus any replacement whose
        own interval touches the range wherever its occurrence was generated.
        Cancelled occurrences are skipped unless ``include_cancelled`` is
        set, in which case they are yielded with ``None`` as the instance.
        Generated starts and instances are expressed in ``zone``.

        Raises:
            InvalidArgumentError: If the series is unbounded and no range was
                given, or only one range bound was given.
        """
        if (range_start is None) != (range_end is None):
            raise InvalidArgumentError("Expansion range needs both a start and an end")
        if range_start is None and not self.is_bounded:
            raise InvalidArgumentError(
                f"Recurring event {self.subject!r} is unbounded; "
                "expansion requires a range"
            )

        rule_zone = self._template.zone
        rule = build_rule(
            self._template.start,
            self._weekday_mask,
            count=self._occurrence_limit,
            until=self._recurrence_end,
        )
        if range_start is None:
            starts: Iterator[datetime] = iter(rule)
        else:
            low = instant(require_aware(range_start, "Range start"))
            high = instant(require_aware(range_end, "Range end"))
            generated = rule.between(in_zone(low, rule_zone), in_zone(high, rule_zone), inc=True)
            seen = {instant(start) for start in generated}
            moved_in = [
                in_zone(key, rule_zone)
                for key, replacement in self._exceptions.items()
                if replacement is not None
                and key not in seen
                and _touches(replacement, low, high)
            ]
            starts = iter(sorted([*generated, *moved_in], key=instant))

        for occurrence_start in starts:
            key = instant(occurrence_start)
            local_start = in_zone(occurrence_start, self._zone)
            if key in self._exceptions:
                replacement = self._exceptions[key]
                if replacement is None:
                    if include_cancelled:
                        yield local_start, None
                    continue
                yield local_start, replacement.copy()
                continue
            instance = self._template.moved_to(occurrence_start)
            instance.zone = self._zone
            yield local_start, instance

    def expand(
        self,
        range_start: datetime | None = None,
        range_end: datetime | None = None,
    ) -> list[Event]:
        """Return the series instances, exceptions applied, in order."""
        return [
            event
            for _, event in self.iter_occurrences(range_start, range_end)
            if event is not None
        ]

    def _has_occurrence(self, at: datetime) -> bool:
        return any(
            instant(generated) == instant(at)
            for generated, _ in self.iter_occurrences(at, at, include_cancelled=True)
        )

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, RecurringEvent):
            return NotImplemented
        return (
            self._template == other._template
            and self._weekday_mask == other._weekday_mask
            and self._occurrence_limit == other._occurrence_limit
            and self._recurrence_end == other._recurrence_end
            and self._exceptions == other._exceptions
            and zone_id(self._zone) == zone_id(other._zone)
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"RecurringEvent({self.subject!r}, {self.start.isoformat(timespec='minutes')},"
            f" days={self.weekdays or 'daily'}, limit={self._occurrence_limit},"
            f" until={self._recurrence_end})"
        )


def _touches(event: Event, low: datetime, high: datetime) -> bool:
    """Whether the span between the event's start and effective end meets ``[low, high]``."""
    first, last = sorted((instant(event.start), instant(event.effective_end)))
    return first <= high and last >= low


def _coerce_subject(value: Any) -> str:
    return "" if value is None else str(value)


def _validate_limit(value: int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"Occurrences must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidArgumentError("Occurrences must be positive")
    return value


def _validate_recurrence_end(value: datetime | None, template: Event) -> datetime | None:
    if value is None:
        return None
    value = in_zone(require_aware(value, "Recurrence end"), template.zone)
    if instant(value) < instant(template.start):
        raise InvalidArgumentError("Recurrence end cannot be before start")
    return value


def _validate_span(template: Event) -> None:
    """Reject templates whose interval covers more than one calendar day."""
    if template.end is None:
        return
    start, end = template.start, template.end
    if instant(end) < instant(start):
        raise InvalidArgumentError("Recurring event end cannot be before its start")
    if end.date() == start.date():
        return
    next_day = start.date() + timedelta(days=1)
    if end.date() == next_day and end.time() == time.min:
        return
    raise InvalidArgumentError("Recurring events cannot span multiple days")
