# File: recurrence_rules.py
"""Recurrence rule variants, schedule anchors and results.

Each recurrence type is its own frozen dataclass carrying only the fields
that type needs. Range checks run in `__post_init__`, so a variant with
missing or out-of-range configuration cannot be constructed; the calculator
never has to second-guess its input.

Loosely typed storage records are turned into these variants by
`recurrence_spec.build_recurrence_rule()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar

from . import const
from .type_defs import RecurrenceDates
from .utils.dt_utils import dt_format_date, dt_parse_date

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class RecurrenceError(Exception):
    """Base class for recurrence calculation failures."""


class InvalidConfigurationError(RecurrenceError):
    """A recurrence configuration is missing a field or holds a bad value.

    Always a caller error; never retried.

    Attributes:
        recurrence_type: The RECURRENCE_TYPE_* being configured (None if the
            type itself is the problem)
        field: Storage key of the offending field, if any
        reason: Short human-readable explanation
    """

    def __init__(
        self,
        recurrence_type: str | None,
        field: str | None = None,
        reason: str = "missing required field",
    ) -> None:
        """Initialize InvalidConfigurationError.

        Args:
            recurrence_type: Recurrence type being configured
            field: Storage key of the offending field
            reason: Short explanation
        """
        self.recurrence_type = recurrence_type
        self.field = field
        self.reason = reason
        detail = f"{field}: {reason}" if field else reason
        super().__init__(f"Invalid configuration for {recurrence_type}: {detail}")


def _require_int(
    recurrence_type: str,
    field: str,
    value: object,
    minimum: int,
    maximum: int | None = None,
) -> None:
    """Raise InvalidConfigurationError unless value is an int within range."""
    if value is None:
        raise InvalidConfigurationError(recurrence_type, field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfigurationError(
            recurrence_type, field, f"expected an integer, got {value!r}"
        )
    if value < minimum or (maximum is not None and value > maximum):
        upper = "" if maximum is None else f"..{maximum}"
        raise InvalidConfigurationError(
            recurrence_type, field, f"{value} outside {minimum}{upper}"
        )


# ==============================================================================
# RULE VARIANTS
# ==============================================================================


@dataclass(frozen=True, slots=True)
class NotRecurring:
    """Marker for tasks that do not recur."""

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_NONE


@dataclass(frozen=True, slots=True)
class Daily:
    """Every day, counted from completion."""

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_DAILY


@dataclass(frozen=True, slots=True)
class EveryXDays:
    """Every `interval` days, counted from completion."""

    interval: int

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_EVERY_X_DAYS

    def __post_init__(self) -> None:
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_INTERVAL,
            self.interval,
            1,
        )


@dataclass(frozen=True, slots=True)
class Weekly:
    """Every week on `day_of_week` (1=Monday..7=Sunday)."""

    day_of_week: int

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_WEEKLY

    def __post_init__(self) -> None:
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_DAY_OF_WEEK,
            self.day_of_week,
            const.WEEKDAY_MONDAY,
            const.WEEKDAY_SUNDAY,
        )


@dataclass(frozen=True, slots=True)
class Biweekly:
    """Every other week on `day_of_week`, locked to a 14-day grid."""

    day_of_week: int

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_BIWEEKLY

    def __post_init__(self) -> None:
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_DAY_OF_WEEK,
            self.day_of_week,
            const.WEEKDAY_MONDAY,
            const.WEEKDAY_SUNDAY,
        )


@dataclass(frozen=True, slots=True)
class MonthlyDate:
    """Same day of every month; clamped to month end (31st -> Feb 28)."""

    day_of_month: int

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_MONTHLY_DATE

    def __post_init__(self) -> None:
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_DAY_OF_MONTH,
            self.day_of_month,
            1,
            31,
        )


@dataclass(frozen=True, slots=True)
class MonthlyDay:
    """Nth weekday of every month (week_of_month -1 = last)."""

    week_of_month: int
    day_of_week: int

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_MONTHLY_DAY

    def __post_init__(self) -> None:
        if self.week_of_month is None:
            raise InvalidConfigurationError(
                self.recurrence_type, const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH
            )
        if self.week_of_month not in const.WEEK_OF_MONTH_OPTIONS or isinstance(
            self.week_of_month, bool
        ):
            raise InvalidConfigurationError(
                self.recurrence_type,
                const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH,
                f"{self.week_of_month!r} not in {const.WEEK_OF_MONTH_OPTIONS}",
            )
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_DAY_OF_WEEK_MONTHLY,
            self.day_of_week,
            const.WEEKDAY_MONDAY,
            const.WEEKDAY_SUNDAY,
        )


@dataclass(frozen=True, slots=True)
class Annually:
    """Same month and day every year; Feb 29 clamps to Feb 28."""

    month: int
    day_of_month: int

    recurrence_type: ClassVar[str] = const.RECURRENCE_TYPE_ANNUALLY

    def __post_init__(self) -> None:
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_MONTH,
            self.month,
            1,
            12,
        )
        _require_int(
            self.recurrence_type,
            const.DATA_TASK_RECURRENCE_DAY_OF_MONTH,
            self.day_of_month,
            1,
            31,
        )


@dataclass(frozen=True, slots=True)
class Astronomical:
    """A moon phase, a single solstice/equinox, or every season change."""

    recurrence_type: str

    def __post_init__(self) -> None:
        if self.recurrence_type not in const.ASTRONOMICAL_RECURRENCE_TYPES:
            raise InvalidConfigurationError(
                self.recurrence_type,
                const.DATA_TASK_RECURRENCE_TYPE,
                "not an astronomical recurrence type",
            )


RecurrenceRule = (
    NotRecurring
    | Daily
    | EveryXDays
    | Weekly
    | Biweekly
    | MonthlyDate
    | MonthlyDay
    | Annually
    | Astronomical
)


# ==============================================================================
# ANCHOR / RESULT
# ==============================================================================


@dataclass(frozen=True, slots=True)
class ScheduleAnchor:
    """The dates stored on a task from its previous occurrence."""

    display_date: date | None = None
    due_date: date | None = None

    @property
    def event_date(self) -> date | None:
        """The stored event date: due date when set, else display date."""
        return self.due_date or self.display_date

    @classmethod
    def from_iso(
        cls,
        display_date: str | date | None = None,
        due_date: str | date | None = None,
        recurrence_type: str | None = None,
    ) -> ScheduleAnchor:
        """Build an anchor from stored ISO calendar-date strings.

        Raises:
            InvalidConfigurationError: a non-empty value is not a valid date.
        """
        parsed: dict[str, date | None] = {}
        for field, raw in (
            (const.DATA_TASK_DISPLAY_DATE, display_date),
            (const.DATA_TASK_DUE_DATE, due_date),
        ):
            value = dt_parse_date(raw)
            if raw and value is None:
                raise InvalidConfigurationError(
                    recurrence_type, field, f"malformed date {raw!r}"
                )
            parsed[field] = value

        return cls(
            display_date=parsed[const.DATA_TASK_DISPLAY_DATE],
            due_date=parsed[const.DATA_TASK_DUE_DATE],
        )


@dataclass(frozen=True, slots=True)
class RecurrenceResult:
    """Next occurrence dates; both None when the task does not recur."""

    display_date: date | None = None
    due_date: date | None = None

    def as_iso(self) -> RecurrenceDates:
        """Return the result as ISO calendar-date strings."""
        return {
            "display_date": dt_format_date(self.display_date),
            "due_date": dt_format_date(self.due_date),
        }
