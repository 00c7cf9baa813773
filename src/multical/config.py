"""Validated runtime settings."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import voluptuous as vol

from ._zones import resolve_zone
from .const import (
    CONF_AUTO_DECLINE,
    CONF_DEFAULT_CALENDAR_NAME,
    CONF_DEFAULT_TIMEZONE,
    CONF_EXPORT_HORIZON_YEARS,
    CONF_RECURRENCE_HORIZON_DAYS,
    DEFAULT_AUTO_DECLINE,
    DEFAULT_CALENDAR_NAME,
    DEFAULT_EXPORT_HORIZON_YEARS,
    DEFAULT_RECURRENCE_HORIZON_DAYS,
    DEFAULT_TIMEZONE,
    ENV_PREFIX,
)
from .exceptions import CalendarError, InvalidArgumentError

_LOGGER = logging.getLogger(__name__)


def _zone_id(value: Any) -> str:
    """Voluptuous validator for IANA zone ids."""
    try:
        resolve_zone(value)
    except CalendarError as err:
        raise vol.Invalid(str(err)) from err
    return str(value).strip()


SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_DEFAULT_CALENDAR_NAME, default=DEFAULT_CALENDAR_NAME): vol.All(
            str, vol.Strip, vol.Length(min=1)
        ),
        vol.Optional(CONF_DEFAULT_TIMEZONE, default=DEFAULT_TIMEZONE): _zone_id,
        vol.Optional(CONF_AUTO_DECLINE, default=DEFAULT_AUTO_DECLINE): vol.Boolean(),
        vol.Optional(
            CONF_RECURRENCE_HORIZON_DAYS, default=DEFAULT_RECURRENCE_HORIZON_DAYS
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(
            CONF_EXPORT_HORIZON_YEARS, default=DEFAULT_EXPORT_HORIZON_YEARS
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)


@dataclass(frozen=True)
class Settings:
    """Settings shared by the manager, command layer and exporter.

    Use ``dataclasses.replace()`` to derive modified copies.
    """

    default_calendar_name: str = DEFAULT_CALENDAR_NAME
    default_timezone: str = DEFAULT_TIMEZONE
    auto_decline: bool = DEFAULT_AUTO_DECLINE
    recurrence_horizon_days: int = DEFAULT_RECURRENCE_HORIZON_DAYS
    export_horizon_years: int = DEFAULT_EXPORT_HORIZON_YEARS

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> Settings:
        """Validate a settings mapping; missing keys take their defaults.

        Raises:
            InvalidArgumentError: If any value fails validation.
        """
        try:
            validated = SETTINGS_SCHEMA(dict(data or {}))
        except vol.Invalid as err:
            raise InvalidArgumentError(f"Invalid settings: {err}") from err
        return cls(**validated)


def settings_from_env(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``MULTICAL_*`` environment variables."""
    environ = os.environ if environ is None else environ
    data = {}
    for key in SETTINGS_SCHEMA.schema:
        env_key = f"{ENV_PREFIX}{key}".upper()
        if env_key in environ:
            data[str(key)] = environ[env_key]
    if data:
        _LOGGER.debug("Settings from environment: %s", sorted(data))
    return Settings.from_mapping(data)
