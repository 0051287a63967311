"""Schedule Engine for todo-recurrence.

Computes the next occurrence of a recurring task from its rule, the dates
stored from its previous occurrence, and the logical "today".

Calculation modes:
- from-completion-date: daily, every-x-days (drift with completion);
  weekly (snaps to the next matching weekday)
- anchored-to-schedule: biweekly (locked to a 14-day grid from the stored
  display date)
- calendar-based: monthly-date, monthly-day, annually (soonest calendar
  match strictly after max(stored event date, today), clamped to month end)
- astronomical: moon phases and season changes from an injected
  AstronomicalEventSource

Uses `dateutil.relativedelta` (via utils.dt_utils) for month/year clamping
and weekday anchors.

IMPORTANT: The engine is pure. No I/O, no clock reads inside
RecurrenceEngine; "today" is always passed in.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import TYPE_CHECKING, assert_never

from .. import const
from ..config import RecurrenceSettings
from ..recurrence_rules import (
    Annually,
    Astronomical,
    Biweekly,
    Daily,
    EveryXDays,
    InvalidConfigurationError,
    MonthlyDate,
    MonthlyDay,
    NotRecurring,
    RecurrenceResult,
    ScheduleAnchor,
    Weekly,
)
from ..recurrence_spec import (
    build_recurrence_rule,
    get_recurrence_spec,
    parse_display_offset,
)
from ..utils.dt_utils import (
    as_local,
    dt_add_days,
    dt_clamp_day,
    dt_first_of_next_month,
    dt_next_weekday,
    dt_now_local,
    dt_nth_weekday_of_month,
    start_of_local_day,
)
from .astronomy_engine import EphemEventSource, NoOccurrenceFoundError

if TYPE_CHECKING:
    from ..recurrence_rules import RecurrenceRule
    from ..type_defs import RecurrenceDates, TaskRecurrenceData
    from .astronomy_engine import AstronomicalEventSource


class RecurrenceEngine:
    """Next-occurrence calculator for all recurrence types.

    Stateless apart from its collaborators: an astronomical event source and
    the timezone used to turn event instants into calendar dates. Safe to
    share between threads.
    """

    def __init__(
        self,
        event_source: AstronomicalEventSource | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        """Initialize the recurrence engine.

        Args:
            event_source: Astronomical oracle (PyEphem if omitted)
            tz: Zone astronomical instants are read in (UTC if omitted)
        """
        self._event_source = event_source or EphemEventSource()
        self._tz = tz or UTC

    def next_occurrence(
        self,
        rule: RecurrenceRule,
        anchor: ScheduleAnchor | None,
        logical_today: date,
        offset: int | None = None,
        is_initial_creation: bool = False,
    ) -> RecurrenceResult:
        """Calculate the next (or first) occurrence of a recurring task.

        Args:
            rule: Recurrence rule variant
            anchor: Dates stored from the previous occurrence
            logical_today: Today, after applying the day boundary hour
            offset: Days to show the task before its event (offset types only)
            is_initial_creation: True when scheduling a newly created task

        Returns:
            RecurrenceResult; empty for NotRecurring.

        Raises:
            InvalidConfigurationError: required data missing (e.g. biweekly
                without a stored display date) or a negative offset.
            NoOccurrenceFoundError: the astronomical search found nothing.
        """
        if isinstance(rule, NotRecurring):
            return RecurrenceResult()

        anchor = anchor or ScheduleAnchor()
        offset = self._validate_offset(rule.recurrence_type, offset)
        spec = get_recurrence_spec(rule.recurrence_type)

        const.LOGGER.debug(
            "RecurrenceEngine: %s (%s) today=%s anchor=%s initial=%s",
            rule.recurrence_type,
            spec.calculation_mode,
            logical_today,
            anchor,
            is_initial_creation,
        )

        if not spec.supports_offset:
            if offset:
                const.LOGGER.debug(
                    "RecurrenceEngine: Offset %d ignored for %s",
                    offset,
                    rule.recurrence_type,
                )
            display_date = self._next_display_date(
                rule, anchor, logical_today, is_initial_creation
            )
            return RecurrenceResult(display_date=display_date)

        comparison_date = max(anchor.event_date or logical_today, logical_today)
        event_date = self._next_event_date(rule, comparison_date)
        return self._apply_offset(event_date, offset)

    def get_occurrences(
        self,
        rule: RecurrenceRule,
        anchor: ScheduleAnchor | None,
        logical_today: date,
        count: int,
        offset: int | None = None,
        is_initial_creation: bool = False,
    ) -> list[RecurrenceResult]:
        """Preview the next `count` occurrences.

        Each occurrence is assumed to be completed on its display date, and
        the following one is calculated from there.
        """
        if isinstance(rule, NotRecurring) or count <= 0:
            return []

        results: list[RecurrenceResult] = []
        today = logical_today
        result = self.next_occurrence(
            rule, anchor, today, offset, is_initial_creation=is_initial_creation
        )

        while True:
            results.append(result)
            if len(results) >= count or result.display_date is None:
                break
            today = max(today, result.display_date)
            next_anchor = ScheduleAnchor(
                display_date=result.display_date, due_date=result.due_date
            )
            result = self.next_occurrence(rule, next_anchor, today, offset)

        return results

    # =========================================================================
    # Private: simple types (display date only)
    # =========================================================================

    def _next_display_date(
        self,
        rule: RecurrenceRule,
        anchor: ScheduleAnchor,
        today: date,
        is_initial_creation: bool,
    ) -> date:
        """Display date for daily, every-x-days, weekly and biweekly."""
        if isinstance(rule, Daily):
            return today if is_initial_creation else dt_add_days(today, 1)

        if isinstance(rule, EveryXDays):
            return today if is_initial_creation else dt_add_days(today, rule.interval)

        if isinstance(rule, Weekly):
            # Completed on the scheduled weekday -> exactly +7; otherwise the
            # very next matching weekday. Both are "strictly after today".
            return dt_next_weekday(today, rule.day_of_week)

        if isinstance(rule, Biweekly):
            if is_initial_creation:
                return dt_next_weekday(today, rule.day_of_week)
            if anchor.display_date is None:
                const.LOGGER.warning(
                    "RecurrenceEngine: biweekly task has no stored display date"
                )
                raise InvalidConfigurationError(
                    rule.recurrence_type, const.DATA_TASK_DISPLAY_DATE
                )
            return self._fast_forward_biweekly(anchor.display_date, today)

        raise InvalidConfigurationError(
            rule.recurrence_type,
            const.DATA_TASK_RECURRENCE_TYPE,
            "not a display-date-only recurrence type",
        )

    @staticmethod
    def _fast_forward_biweekly(anchor_date: date, today: date) -> date:
        """Advance the anchor by whole 14-day hops until strictly after today.

        At least one hop is always taken, so early completion never returns
        the anchor itself.
        """
        elapsed = (today - anchor_date).days
        hops = max(1, elapsed // const.BIWEEKLY_INTERVAL_DAYS + 1)
        return anchor_date + timedelta(days=hops * const.BIWEEKLY_INTERVAL_DAYS)

    # =========================================================================
    # Private: event-based types
    # =========================================================================

    def _next_event_date(self, rule: RecurrenceRule, comparison_date: date) -> date:
        """Event date strictly after comparison_date."""
        if isinstance(rule, (MonthlyDate, MonthlyDay)):
            return self._next_monthly_event(rule, comparison_date)
        if isinstance(rule, Annually):
            return self._next_annual_event(rule, comparison_date)
        if isinstance(rule, Astronomical):
            return self._next_astronomical_event(rule, comparison_date)
        if isinstance(rule, (NotRecurring, Daily, EveryXDays, Weekly, Biweekly)):
            raise InvalidConfigurationError(
                rule.recurrence_type,
                const.DATA_TASK_RECURRENCE_TYPE,
                "not an event-based recurrence type",
            )
        assert_never(rule)

    @staticmethod
    def _monthly_candidate(rule: MonthlyDate | MonthlyDay, year: int, month: int) -> date:
        if isinstance(rule, MonthlyDate):
            return dt_clamp_day(year, month, rule.day_of_month)
        return dt_nth_weekday_of_month(
            year, month, rule.day_of_week, rule.week_of_month
        )

    def _next_monthly_event(
        self, rule: MonthlyDate | MonthlyDay, comparison_date: date
    ) -> date:
        """Soonest monthly match strictly after comparison_date."""
        month_start = comparison_date.replace(day=1)

        for _ in range(const.MAX_DATE_CALCULATION_ITERATIONS):
            candidate = self._monthly_candidate(
                rule, month_start.year, month_start.month
            )
            if candidate > comparison_date:
                return candidate
            month_start = dt_first_of_next_month(month_start)

        const.LOGGER.warning(
            "RecurrenceEngine: Max iterations reached for %s", rule.recurrence_type
        )
        raise NoOccurrenceFoundError(
            rule.recurrence_type, start_of_local_day(comparison_date, self._tz)
        )

    @staticmethod
    def _next_annual_event(rule: Annually, comparison_date: date) -> date:
        """This year's month/day if still ahead, else next year's.

        Next year's date is rebuilt from the configured day, so Feb 29 comes
        back in leap years after a clamped Feb 28.
        """
        candidate = dt_clamp_day(comparison_date.year, rule.month, rule.day_of_month)
        if candidate > comparison_date:
            return candidate
        return dt_clamp_day(comparison_date.year + 1, rule.month, rule.day_of_month)

    def _next_astronomical_event(self, rule: Astronomical, comparison_date: date) -> date:
        rtype = rule.recurrence_type

        if rtype in const.MOON_RECURRENCE_TYPES:
            return self._next_moon_phase(
                const.RECURRENCE_TYPE_TO_EVENT[rtype], comparison_date
            )

        if rtype == const.RECURRENCE_TYPE_EVERY_SEASON:
            event_kinds = const.SEASON_EVENTS
        else:
            event_kinds = [const.RECURRENCE_TYPE_TO_EVENT[rtype]]

        # Current and next year always cover at least a full year ahead
        candidates: list[date] = []
        for year in (comparison_date.year, comparison_date.year + 1):
            seasons = self._event_source.seasons_of_year(year)
            candidates.extend(
                self._to_local_date(seasons.for_event(kind)) for kind in event_kinds
            )

        upcoming = sorted(day for day in candidates if day > comparison_date)
        if not upcoming:
            const.LOGGER.warning(
                "RecurrenceEngine: No %s found after %s", rtype, comparison_date
            )
            raise NoOccurrenceFoundError(
                event_kinds[0], start_of_local_day(comparison_date, self._tz)
            )
        return upcoming[0]

    def _next_moon_phase(self, event_kind: str, comparison_date: date) -> date:
        """Moon phase strictly after comparison_date.

        The search starts the day after comparison_date so an event on the
        comparison day itself is never matched again.
        """
        search_day = dt_add_days(comparison_date, 1)

        for _ in range(const.MAX_DATE_CALCULATION_ITERATIONS):
            search_start = start_of_local_day(search_day, self._tz)
            instant = self._event_source.next_event_after(
                event_kind, search_start, const.MOON_SEARCH_WINDOW_DAYS
            )
            if instant is None:
                const.LOGGER.warning(
                    "RecurrenceEngine: No %s within %d days of %s",
                    event_kind,
                    const.MOON_SEARCH_WINDOW_DAYS,
                    search_start,
                )
                raise NoOccurrenceFoundError(event_kind, search_start)

            event_date = self._to_local_date(instant)
            if event_date > comparison_date:
                return event_date
            search_day = dt_add_days(max(event_date, comparison_date), 1)

        const.LOGGER.warning(
            "RecurrenceEngine: Max iterations reached for %s", event_kind
        )
        raise NoOccurrenceFoundError(event_kind, start_of_local_day(search_day, self._tz))

    def _to_local_date(self, instant: datetime) -> date:
        return as_local(instant, self._tz).date()

    # =========================================================================
    # Private: helpers
    # =========================================================================

    @staticmethod
    def _apply_offset(event_date: date, offset: int) -> RecurrenceResult:
        """Split an event date into display/due dates.

        offset > 0: due on the event, displayed `offset` days earlier.
        offset == 0: displayed on the event, no due date.
        """
        if offset > 0:
            return RecurrenceResult(
                display_date=dt_add_days(event_date, -offset), due_date=event_date
            )
        return RecurrenceResult(display_date=event_date)

    @staticmethod
    def _validate_offset(recurrence_type: str, offset: int | None) -> int:
        if offset is None:
            return 0
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise InvalidConfigurationError(
                recurrence_type,
                const.DATA_TASK_DISPLAY_DATE_OFFSET,
                f"expected a non-negative integer, got {offset!r}",
            )
        return offset


# =============================================================================
# Module-level convenience functions
# =============================================================================


def to_rrule_string(rule: RecurrenceRule) -> str:
    """Generate an RFC 5545 RRULE string for iCal export.

    Day-of-month values past 28 are written with BYSETPOS=-1 over the
    candidate days, which reproduces month-end clamping (31st -> Feb 28).

    Returns:
        RRULE string (e.g., "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO"), or an empty
        string for types RRULE cannot express (astronomical, none).
    """
    if isinstance(rule, Daily):
        return "FREQ=DAILY;INTERVAL=1"
    if isinstance(rule, EveryXDays):
        return f"FREQ=DAILY;INTERVAL={rule.interval}"
    if isinstance(rule, Weekly):
        return f"FREQ=WEEKLY;INTERVAL=1;BYDAY={_rrule_day(rule.day_of_week)}"
    if isinstance(rule, Biweekly):
        return f"FREQ=WEEKLY;INTERVAL=2;BYDAY={_rrule_day(rule.day_of_week)}"
    if isinstance(rule, MonthlyDate):
        return f"FREQ=MONTHLY;{_rrule_month_day(rule.day_of_month)}"
    if isinstance(rule, MonthlyDay):
        return (
            f"FREQ=MONTHLY;BYDAY={rule.week_of_month}{_rrule_day(rule.day_of_week)}"
        )
    if isinstance(rule, Annually):
        return f"FREQ=YEARLY;BYMONTH={rule.month};{_rrule_month_day(rule.day_of_month)}"
    return ""


def _rrule_day(iso_weekday: int) -> str:
    return const.RRULE_WEEKDAY_CODES[iso_weekday - 1]


def _rrule_month_day(day_of_month: int) -> str:
    if day_of_month <= const.MIN_DAYS_IN_MONTH:
        return f"BYMONTHDAY={day_of_month}"
    days = ",".join(str(d) for d in range(const.MIN_DAYS_IN_MONTH, day_of_month + 1))
    return f"BYMONTHDAY={days};BYSETPOS=-1"


def calculate_next_recurrence(
    task_info: TaskRecurrenceData,
    now: datetime | None = None,
    settings: RecurrenceSettings | None = None,
    *,
    is_initial_creation: bool = False,
    event_source: AstronomicalEventSource | None = None,
) -> RecurrenceDates:
    """Calculate the next recurrence dates for a stored task record.

    Boundary entry point for the task storage layer: parses the loosely
    typed record, resolves logical today from `now` and the settings, and
    returns ISO calendar-date strings ready to persist.

    Args:
        task_info: Stored task fields (DATA_TASK_* keys)
        now: Current instant; defaults to the wall clock in settings.timezone
        settings: Day boundary hour and timezone (defaults if omitted)
        is_initial_creation: True when the task is first made recurring
        event_source: Astronomical oracle override (tests)

    Returns:
        {"display_date": ..., "due_date": ...}; both None when the task is
        not recurring.

    Raises:
        InvalidConfigurationError: the stored configuration is incomplete or
            malformed.
        NoOccurrenceFoundError: no astronomical event could be found.
    """
    settings = settings or RecurrenceSettings()

    # Records without the flag are judged by their recurrence type alone
    if not task_info.get(const.DATA_TASK_IS_RECURRING, True):
        return RecurrenceResult().as_iso()

    rule = build_recurrence_rule(
        task_info.get(const.DATA_TASK_RECURRENCE_TYPE), task_info
    )
    if isinstance(rule, NotRecurring):
        return RecurrenceResult().as_iso()

    anchor = ScheduleAnchor.from_iso(
        task_info.get(const.DATA_TASK_DISPLAY_DATE),
        task_info.get(const.DATA_TASK_DUE_DATE),
        recurrence_type=rule.recurrence_type,
    )
    current = now or dt_now_local(settings.tzinfo)
    logical_today = settings.logical_today(current)

    engine = RecurrenceEngine(event_source=event_source, tz=settings.tzinfo)
    result = engine.next_occurrence(
        rule,
        anchor,
        logical_today,
        offset=parse_display_offset(
            rule.recurrence_type, task_info.get(const.DATA_TASK_DISPLAY_DATE_OFFSET)
        ),
        is_initial_creation=is_initial_creation,
    )
    return result.as_iso()


def calculate_next_recurrence_from_fields(
    recurrence_type: str,
    config: TaskRecurrenceData,
    logical_today: date,
    *,
    is_initial_creation: bool = False,
    event_source: AstronomicalEventSource | None = None,
    tz: tzinfo | None = None,
) -> RecurrenceResult:
    """Calculate from a type name and fields when logical today is known.

    Convenience for callers that already resolved the day boundary.
    """
    rule = build_recurrence_rule(recurrence_type, config)
    anchor = ScheduleAnchor.from_iso(
        config.get(const.DATA_TASK_DISPLAY_DATE),
        config.get(const.DATA_TASK_DUE_DATE),
        recurrence_type=rule.recurrence_type,
    )
    engine = RecurrenceEngine(event_source=event_source, tz=tz)
    return engine.next_occurrence(
        rule,
        anchor,
        logical_today,
        offset=parse_display_offset(
            rule.recurrence_type, config.get(const.DATA_TASK_DISPLAY_DATE_OFFSET)
        ),
        is_initial_creation=is_initial_creation,
    )
