"""Text output for the command layer."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from .const import PRINT_DATETIME_FORMAT
from .models import Event


def format_event(event: Event) -> str:
    """``subject: start to end at location`` in the event's own zone."""
    start = event.start.strftime(PRINT_DATETIME_FORMAT)
    end = event.end.strftime(PRINT_DATETIME_FORMAT) if event.end is not None else "No end time"
    location = event.location if event.location is not None else "No location"
    return f"{event.subject}: {start} to {end} at {location}"


class TextView:
    """Writes messages and event listings to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys sees the output.
        return self._stream if self._stream is not None else sys.stdout

    def display(self, message: str) -> None:
        print(message, file=self.stream)

    def print_events(self, events: Iterable[Event] | None) -> None:
        events = list(events or ())
        if not events:
            self.display("No events to display.")
            return
        for event in events:
            self.display(format_event(event))
