"""Timezone helpers for zoned instants."""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import InvalidArgumentError

UTC = ZoneInfo("UTC")


def resolve_zone(value: str | tzinfo | None) -> tzinfo:
    """Return a tzinfo for a zone id or pass an existing tzinfo through.

    Raises:
        InvalidArgumentError: If the value is missing or not a known zone id.
    """
    if value is None:
        raise InvalidArgumentError("Zone ID cannot be null")
    if isinstance(value, tzinfo):
        return value
    try:
        return ZoneInfo(str(value).strip())
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise InvalidArgumentError(f"Unknown timezone: {value}") from err


def zone_id(zone: tzinfo) -> str:
    """Return the identifier of a zone (``America/New_York``, ``UTC``)."""
    key = getattr(zone, "key", None)
    return key if key else str(zone)


def require_aware(value: datetime | None, what: str) -> datetime:
    """Reject missing or naive datetimes."""
    if value is None:
        raise InvalidArgumentError(f"{what} cannot be null")
    if not isinstance(value, datetime):
        raise InvalidArgumentError(
            f"{what} must be a datetime, got {type(value).__name__}"
        )
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidArgumentError(f"{what} must be timezone-aware")
    return value


def in_zone(value: datetime, zone: tzinfo) -> datetime:
    """Re-express ``value`` in ``zone`` without moving the instant."""
    return value.astimezone(zone)


def instant(value: datetime) -> datetime:
    """Normalise an aware datetime to UTC for absolute comparisons.

    Aware datetimes sharing one tzinfo compare by wall clock, which is wrong
    across a DST fold; comparing in UTC never is.
    """
    return value.astimezone(timezone.utc)


def localize(value: datetime, zone: tzinfo) -> datetime:
    """Attach ``zone`` to a naive datetime; aware values are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value.astimezone(zone)


def start_of_day(day: date, zone: tzinfo) -> datetime:
    """Midnight of ``day`` in ``zone``."""
    return datetime.combine(day, time.min, tzinfo=zone)
