"""Settings for todo-recurrence.

The engine needs two settings: the day boundary hour and the timezone used
to resolve "now" into a calendar day. They are resolved once into an
immutable RecurrenceSettings object and passed explicitly to every call.

Priority: explicit overrides > environment variables > defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
import os
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from . import const
from .recurrence_rules import InvalidConfigurationError
from .recurrence_spec import strict_int
from .utils.dt_utils import dt_logical_today


def _valid_timezone(value: Any) -> str:
    """Voluptuous validator: an IANA timezone name that zoneinfo can load."""
    if not isinstance(value, str) or not value:
        raise vol.Invalid("timezone must be a non-empty IANA name")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"unknown timezone {value!r}") from err
    return value


_DAY_BOUNDARY_HOUR = vol.All(strict_int, vol.Range(min=0, max=23))

SETTINGS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.CONF_DAY_BOUNDARY_HOUR, default=const.DEFAULT_DAY_BOUNDARY_HOUR
        ): _DAY_BOUNDARY_HOUR,
        vol.Optional(const.CONF_TIMEZONE, default=const.DEFAULT_TIMEZONE): (
            _valid_timezone
        ),
    }
)


@dataclass(frozen=True, slots=True)
class RecurrenceSettings:
    """Resolved day boundary hour and timezone."""

    day_boundary_hour: int = const.DEFAULT_DAY_BOUNDARY_HOUR
    timezone: str = const.DEFAULT_TIMEZONE

    @property
    def tzinfo(self) -> ZoneInfo:
        """The configured timezone as a ZoneInfo."""
        return ZoneInfo(self.timezone)

    def logical_today(self, now: datetime) -> date:
        """Resolve an instant into the calendar day it counts as."""
        return dt_logical_today(now, self.day_boundary_hour, self.tzinfo)


def _from_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    """Read settings from environment variables, dropping invalid values."""
    values: dict[str, Any] = {}
    for key, env_name, validator in (
        (const.CONF_DAY_BOUNDARY_HOUR, const.ENV_DAY_BOUNDARY_HOUR, _DAY_BOUNDARY_HOUR),
        (const.CONF_TIMEZONE, const.ENV_TIMEZONE, _valid_timezone),
    ):
        raw = environ.get(env_name)
        if not raw:
            continue
        try:
            values[key] = validator(raw)
        except vol.Invalid as err:
            const.LOGGER.warning(
                "Ignoring invalid %s=%r (%s), using default", env_name, raw, err
            )
    return values


def load_settings(
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RecurrenceSettings:
    """Resolve settings from overrides, the environment, and defaults.

    Args:
        overrides: Explicit values keyed by CONF_* constants (e.g. from the
            system settings store)
        environ: Environment mapping (os.environ if omitted)

    Returns:
        Immutable RecurrenceSettings.

    Raises:
        InvalidConfigurationError: an explicit override is invalid.
    """
    values = _from_environ(os.environ if environ is None else environ)
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        validated = SETTINGS_SCHEMA(values)
    except vol.Invalid as err:
        path = getattr(err, "path", None) or [None]
        raise InvalidConfigurationError(None, path[0], err.msg) from err

    return RecurrenceSettings(
        day_boundary_hour=validated[const.CONF_DAY_BOUNDARY_HOUR],
        timezone=validated[const.CONF_TIMEZONE],
    )
