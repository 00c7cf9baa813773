"""Tests for single events: conflicts, all-day handling and zones."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from multical.exceptions import InvalidArgumentError
from multical.models import Event, Visibility

# ---------------------------------------------------------------------------
#  Timezone helpers
# ---------------------------------------------------------------------------
UTC = ZoneInfo("UTC")
NEW_YORK = ZoneInfo("America/New_York")
TOKYO = ZoneInfo("Asia/Tokyo")


def _dt(year: int, month: int, day: int, hour: int = 0, minute: int = 0, tz: ZoneInfo = NEW_YORK) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=tz)


def _make_event(
    subject: str = "Meeting",
    start: datetime | None = None,
    end: datetime | None = None,
    *,
    all_day: bool = False,
    **kwargs,
) -> Event:
    if start is None:
        start = _dt(2025, 3, 3, 10)
    if end is None and not all_day:
        end = start + timedelta(hours=1)
    return Event(subject, start, end, **kwargs)


# ===========================================================================
#  Conflicts
# ===========================================================================


class TestConflicts:
    """Half-open overlap on absolute instants."""

    def test_overlapping_events_conflict_both_ways(self) -> None:
        a = _make_event("A", _dt(2025, 3, 3, 10), _dt(2025, 3, 3, 11))
        b = _make_event("B", _dt(2025, 3, 3, 10, 30), _dt(2025, 3, 3, 11, 30))
        assert a.conflicts_with(b)
        assert b.conflicts_with(a)

    def test_back_to_back_events_do_not_conflict(self) -> None:
        a = _make_event("A", _dt(2025, 3, 3, 10), _dt(2025, 3, 3, 11))
        b = _make_event("B", _dt(2025, 3, 3, 11), _dt(2025, 3, 3, 12))
        assert not a.conflicts_with(b)
        assert not b.conflicts_with(a)

    def test_zero_duration_never_conflicts(self) -> None:
        ping = _make_event("Ping", _dt(2025, 3, 3, 10, 30), _dt(2025, 3, 3, 10, 30))
        meeting = _make_event()
        assert not ping.conflicts_with(meeting)
        assert not meeting.conflicts_with(ping)

    def test_none_never_conflicts(self) -> None:
        assert not _make_event().conflicts_with(None)

    def test_compares_instants_across_zones(self) -> None:
        # 10:00 EST is 15:00 UTC, which is 00:00 the next day in Tokyo.
        meeting = _make_event()
        overlapping = _make_event("Call", _dt(2025, 3, 4, 0, 30, tz=TOKYO))
        adjacent = _make_event("Late call", _dt(2025, 3, 4, 1, 0, tz=TOKYO))
        assert meeting.conflicts_with(overlapping)
        assert overlapping.conflicts_with(meeting)
        assert not meeting.conflicts_with(adjacent)

    def test_all_day_event_blocks_its_whole_day(self) -> None:
        holiday = _make_event("Holiday", _dt(2025, 3, 3), all_day=True)
        assert holiday.conflicts_with(_make_event())
        next_morning = _make_event("Early", _dt(2025, 3, 4, 0), _dt(2025, 3, 4, 1))
        assert not holiday.conflicts_with(next_morning)


# ===========================================================================
#  All-day events and derived values
# ===========================================================================


class TestDerivedValues:
    def test_all_day_effective_end_is_next_midnight(self) -> None:
        holiday = _make_event("Holiday", _dt(2025, 3, 3), all_day=True)
        assert holiday.is_all_day
        assert holiday.end is None
        assert holiday.effective_end == _dt(2025, 3, 4)

    def test_all_day_duration_follows_dst(self) -> None:
        # Clocks spring forward on 2025-03-09 in New York.
        holiday = _make_event("Holiday", _dt(2025, 3, 9), all_day=True)
        assert holiday.duration == timedelta(hours=23)

    def test_occupies_is_strict(self) -> None:
        meeting = _make_event()
        assert meeting.occupies(_dt(2025, 3, 3, 10, 30))
        assert not meeting.occupies(_dt(2025, 3, 3, 10))
        assert not meeting.occupies(_dt(2025, 3, 3, 11))

    def test_moved_to_keeps_duration_in_new_zone(self) -> None:
        meeting = _make_event(end=_dt(2025, 3, 3, 11, 30))
        moved = meeting.moved_to(_dt(2025, 3, 5, 14, tz=TOKYO))
        assert moved.start == _dt(2025, 3, 5, 14, tz=TOKYO)
        assert moved.end == _dt(2025, 3, 5, 15, 30, tz=TOKYO)
        assert moved.zone is TOKYO
        assert meeting.start == _dt(2025, 3, 3, 10)

    def test_moved_all_day_event_stays_all_day(self) -> None:
        holiday = _make_event("Holiday", _dt(2025, 3, 3), all_day=True)
        moved = holiday.moved_to(_dt(2025, 3, 10, 9), all_day_start=_dt(2025, 3, 10))
        assert moved.is_all_day
        assert moved.start == _dt(2025, 3, 10)

    def test_copy_is_independent(self) -> None:
        meeting = _make_event(location="Room 1")
        clone = meeting.copy()
        clone.location = "Room 2"
        assert meeting.location == "Room 1"
        assert clone == _make_event(location="Room 2")


# ===========================================================================
#  Zones
# ===========================================================================


class TestZones:
    def test_explicit_zone_reexpresses_times(self) -> None:
        meeting = _make_event(zone="UTC")
        assert meeting.start == _dt(2025, 3, 3, 15, tz=UTC)
        assert meeting.start.tzinfo is meeting.zone

    def test_zone_setter_keeps_instants(self) -> None:
        meeting = _make_event()
        before = meeting.start
        meeting.zone = TOKYO
        assert meeting.start.hour == 0
        assert meeting.start.day == 4
        assert meeting.start == before

    def test_start_setter_reprojects_into_zone(self) -> None:
        meeting = _make_event()
        meeting.start = _dt(2025, 3, 3, 15, tz=UTC)
        assert meeting.start.tzinfo is NEW_YORK
        assert meeting.start.hour == 10

    def test_unknown_zone_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            _make_event(zone="Mars/Olympus_Mons")


# ===========================================================================
#  Construction, equality and visibility
# ===========================================================================


class TestConstruction:
    def test_naive_start_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Event("Naive", datetime(2025, 3, 3, 10))

    def test_missing_start_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Event("Nothing", None)  # type: ignore[arg-type]

    def test_subject_none_becomes_empty(self) -> None:
        assert _make_event(None).subject == ""

    def test_inverted_interval_is_allowed(self) -> None:
        event = _make_event(end=_dt(2025, 3, 3, 9))
        assert event.duration == timedelta(hours=-1)
        assert not event.conflicts_with(_make_event())

    def test_inverted_interval_uses_plain_overlap(self) -> None:
        event = _make_event(start=_dt(2025, 3, 3, 10, 30), end=_dt(2025, 3, 3, 10, 15))
        assert event.conflicts_with(_make_event())
        assert _make_event().conflicts_with(event)

    def test_equality_includes_zone(self) -> None:
        assert _make_event() == _make_event()
        assert _make_event() != _make_event(zone=UTC)
        assert _make_event() != _make_event(location="Elsewhere")

    def test_events_are_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(_make_event())


class TestVisibility:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, Visibility.PUBLIC),
            (False, Visibility.PRIVATE),
            ("false", Visibility.PRIVATE),
            ("Public", Visibility.PUBLIC),
            (Visibility.PRIVATE, Visibility.PRIVATE),
        ],
    )
    def test_parse(self, value, expected) -> None:
        assert Visibility.parse(value) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(InvalidArgumentError):
            Visibility.parse("maybe")

    def test_is_public_follows_visibility(self) -> None:
        event = _make_event(visibility=False)
        assert not event.is_public
        event.visibility = "public"
        assert event.is_public
