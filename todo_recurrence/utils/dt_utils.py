# File: utils/dt_utils.py
"""Calendar primitives for todo-recurrence.

Pure date functions with no engine state. Everything here operates on
`datetime.date` (calendar days, no time component) except the timezone
helpers, which turn instants into local calendar days.

Uses standard library: datetime, zoneinfo, calendar; and dateutil for
month/year arithmetic with end-of-month clamping (Jan 31 + 1 month = Feb 28).

Functions:
    - dt_now_local: Current instant
    - as_utc / as_local / start_of_local_day: Timezone conversion
    - dt_parse_date / dt_format_date: ISO calendar date I/O
    - dt_add_days / dt_add_months: Day and clamped month arithmetic
    - dt_clamp_day: Build a date, clamping the day to the month length
    - dt_next_weekday: Next matching weekday strictly after a date
    - dt_nth_weekday_of_month: Nth (or last) weekday of a month
    - dt_logical_today: Apply the day boundary hour to an instant
"""

from __future__ import annotations

from calendar import monthrange
from datetime import UTC, date, datetime, timedelta, tzinfo
import logging

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from .. import const

_LOGGER = logging.getLogger(__name__)

# relativedelta weekday anchors indexed by ISO weekday - 1
_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_local(tz: tzinfo | None = None) -> datetime:
    """Return the current datetime in the given timezone (UTC if omitted)."""
    return datetime.now(tz or UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to already be UTC.
    """
    if dt_obj.tzinfo is None:
        return dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert a datetime to a local timezone.

    Args:
        dt_obj: Datetime object; naive values are assumed to be UTC
        tz: Target timezone (UTC if omitted)

    Returns:
        Datetime in the target timezone
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz or UTC)


def start_of_local_day(day: date, tz: tzinfo | None = None) -> datetime:
    """Return midnight at the start of `day` in `tz`, as an aware datetime."""
    return datetime(day.year, day.month, day.day, tzinfo=tz or UTC)


# ==============================================================================
# Date Parsing / Formatting
# ==============================================================================


def dt_parse_date(value: str | date | None) -> date | None:
    """Parse an ISO calendar date into a `datetime.date`.

    Accepts "2026-01-05", a full ISO datetime string (date part is kept), a
    `date` or a `datetime`.

    Returns:
        datetime.date or None if the value is empty or cannot be parsed.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        return date.fromisoformat(value)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        _LOGGER.debug("dt_parse_date: Could not parse date: %s", value)
        return None


def dt_format_date(value: date | None) -> str | None:
    """Format a date as an ISO calendar date string (YYYY-MM-DD)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_add_days(day: date, delta: int) -> date:
    """Add (or subtract) whole days."""
    return day + timedelta(days=delta)


def dt_add_months(day: date, delta: int) -> date:
    """Add months, clamping to the last day of the target month.

    Example:
        dt_add_months(date(2026, 1, 31), 1) -> date(2026, 2, 28)
    """
    return day + relativedelta(months=delta)


def dt_days_in_month(year: int, month: int) -> int:
    """Return the number of days in a month."""
    return monthrange(year, month)[1]


def dt_clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping `day` to the last valid day of the month.

    Example:
        dt_clamp_day(2026, 2, 31) -> date(2026, 2, 28)
        dt_clamp_day(2028, 2, 29) -> date(2028, 2, 29)
    """
    return date(year, month, min(day, dt_days_in_month(year, month)))


def dt_first_of_next_month(day: date) -> date:
    """Return the first day of the month after `day`."""
    return dt_add_months(day.replace(day=1), 1)


# ==============================================================================
# Weekday Search
# ==============================================================================


def dt_next_weekday(day: date, iso_weekday: int) -> date:
    """Return the next date strictly after `day` falling on `iso_weekday`.

    Args:
        day: Reference date (never returned itself)
        iso_weekday: 1=Monday .. 7=Sunday

    Example:
        dt_next_weekday(date(2026, 1, 5), 1) -> date(2026, 1, 12)  # Mon -> Mon
        dt_next_weekday(date(2026, 1, 5), 3) -> date(2026, 1, 7)   # Mon -> Wed
    """
    anchor = _WEEKDAYS[iso_weekday - 1]
    return day + relativedelta(days=1, weekday=anchor(+1))


def dt_nth_weekday_of_month(
    year: int, month: int, iso_weekday: int, week_of_month: int
) -> date:
    """Locate the Nth weekday of a month.

    The first matching weekday of the month is found, then (N - 1) weeks are
    added. A `week_of_month` of -1 walks backward from the last day of the
    month to the nearest matching weekday instead.

    Example:
        dt_nth_weekday_of_month(2026, 2, 2, 2) -> date(2026, 2, 10)   # 2nd Tue
        dt_nth_weekday_of_month(2026, 2, 5, -1) -> date(2026, 2, 27)  # last Fri
    """
    anchor = _WEEKDAYS[iso_weekday - 1]

    if week_of_month == const.WEEK_OF_MONTH_LAST:
        last_day = date(year, month, dt_days_in_month(year, month))
        return last_day + relativedelta(weekday=anchor(-1))

    first_match = date(year, month, 1) + relativedelta(weekday=anchor(+1))
    return first_match + timedelta(weeks=week_of_month - 1)


# ==============================================================================
# Day Boundary
# ==============================================================================


def dt_logical_today(
    now: datetime, day_boundary_hour: int = 0, tz: tzinfo | None = None
) -> date:
    """Return the calendar day an instant counts as for recurrence purposes.

    If the local hour of `now` is strictly less than `day_boundary_hour`, the
    instant still belongs to the previous calendar day. With a boundary of 4,
    2am Tuesday is Monday; 4am Tuesday is Tuesday.

    Args:
        now: The instant to resolve
        day_boundary_hour: Hour (0-23) at which a new day starts
        tz: Zone to read the local hour in. Naive values, or any value when
            `tz` is omitted, are taken as already local wall-clock time.

    Returns:
        The logical calendar day.
    """
    local_now = now if tz is None or now.tzinfo is None else as_local(now, tz)

    if local_now.hour < day_boundary_hour:
        return local_now.date() - timedelta(days=1)
    return local_now.date()


def dt_logical_today_iso(
    now: datetime, day_boundary_hour: int = 0, tz: tzinfo | None = None
) -> str:
    """Return `dt_logical_today` as an ISO calendar date string."""
    return dt_logical_today(now, day_boundary_hour, tz).isoformat()


# A completion timestamp resolves to its recurrence day by the same rule
dt_completion_date_for_recurrence = dt_logical_today
