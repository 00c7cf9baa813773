"""Weekly-weekday recurrence rules.

Recurring events repeat once per matching calendar day. The rule is built on
``dateutil.rrule`` with a ``DAILY`` frequency narrowed by ``byweekday``, which
steps through local calendar days in the series zone and so keeps the
time-of-day stable across DST changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from dateutil.rrule import DAILY, rrule, weekday

from .const import WEEKDAY_TOKENS
from .exceptions import InvalidArgumentError

_LOGGER = logging.getLogger(__name__)

_TOKEN_FOR_DAY = {day: token for token, day in WEEKDAY_TOKENS.items()}


def parse_weekdays(spec: str | Iterable[int | weekday] | None) -> frozenset[int]:
    """Parse a weekday selection into a set of ``datetime.weekday()`` numbers.

    Accepts a token string such as ``"MWF"`` or ``"TR"`` (M T W R F S U,
    case-insensitive, whitespace and commas ignored), an iterable of weekday
    numbers (0 = Monday) or of ``dateutil`` weekday constants. ``None`` or an
    empty selection means every day.

    Raises:
        InvalidArgumentError: On an unknown token or out-of-range number.
    """
    if spec is None:
        return frozenset()
    if isinstance(spec, str):
        days: set[int] = set()
        for char in spec.upper():
            if char.isspace() or char == ",":
                continue
            if char not in WEEKDAY_TOKENS:
                raise InvalidArgumentError(f"Unknown weekday token: {char!r}")
            days.add(WEEKDAY_TOKENS[char])
        return frozenset(days)

    days = set()
    for item in spec:
        number = item.weekday if isinstance(item, weekday) else item
        if not isinstance(number, int) or isinstance(number, bool) or not 0 <= number <= 6:
            raise InvalidArgumentError(f"Unknown weekday: {item!r}")
        days.add(number)
    return frozenset(days)


def format_weekdays(mask: frozenset[int]) -> str:
    """Render a weekday mask back to its token string (Monday first)."""
    return "".join(_TOKEN_FOR_DAY[day] for day in sorted(mask))


def build_rule(
    dtstart: datetime,
    mask: frozenset[int],
    *,
    count: int | None = None,
    until: datetime | None = None,
) -> rrule:
    """Build the daily rule for a series.

    ``dtstart`` and ``until`` must be aware and expressed in the series zone.
    ``dtstart`` itself is only an occurrence when its weekday is in ``mask``.
    """
    _LOGGER.debug(
        "Building rule from %s (days=%s, count=%s, until=%s)",
        dtstart, format_weekdays(mask) or "daily", count, until,
    )
    return rrule(
        DAILY,
        dtstart=dtstart,
        byweekday=sorted(mask) or None,
        count=count,
        until=until,
    )
