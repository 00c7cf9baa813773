"""Tests for the text view."""

from __future__ import annotations

import io
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from multical.models import Event
from multical.view import TextView, format_event

NEW_YORK = ZoneInfo("America/New_York")


def _dt(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=NEW_YORK)


class TestFormatEvent:
    def test_timed_event(self) -> None:
        event = Event("Standup", _dt(2025, 3, 3, 10), _dt(2025, 3, 3, 11), location="Room 1")
        assert format_event(event) == "Standup: 03/03/2025 10:00 to 03/03/2025 11:00 at Room 1"

    def test_placeholders(self) -> None:
        event = Event("Holiday", _dt(2025, 3, 3))
        assert format_event(event) == "Holiday: 03/03/2025 00:00 to No end time at No location"


class TestTextView:
    def test_empty_listing(self) -> None:
        stream = io.StringIO()
        TextView(stream).print_events([])
        assert stream.getvalue() == "No events to display.\n"

    def test_none_listing(self) -> None:
        stream = io.StringIO()
        TextView(stream).print_events(None)
        assert stream.getvalue() == "No events to display.\n"

    def test_one_line_per_event(self) -> None:
        stream = io.StringIO()
        TextView(stream).print_events(
            [Event("A", _dt(2025, 3, 3, 9), _dt(2025, 3, 3, 10)), Event("B", _dt(2025, 3, 4))]
        )
        lines = stream.getvalue().splitlines()
        assert lines == [
            "A: 03/03/2025 09:00 to 03/03/2025 10:00 at No location",
            "B: 03/04/2025 00:00 to No end time at No location",
        ]

    def test_defaults_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        TextView().display("hello")
        assert capsys.readouterr().out == "hello\n"
