"""Shared fixtures for the calendar core tests."""

from __future__ import annotations

import io

import pytest

from multical.calendar import Calendar
from multical.config import Settings
from multical.controller import CalendarController
from multical.manager import CalendarManager
from multical.view import TextView


@pytest.fixture
def calendar() -> Calendar:
    """An empty calendar in New York time."""
    return Calendar("work", "America/New_York")


@pytest.fixture
def manager() -> CalendarManager:
    """A fresh session with the default settings."""
    return CalendarManager(Settings())


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def controller(manager: CalendarManager, output: io.StringIO) -> CalendarController:
    return CalendarController(manager, TextView(output))
