"""Tests for recurrence_spec.py and the rule variants in recurrence_rules.py.

Covers the specification table, structural validation of stored records,
and parsing into rule variants (fail closed on missing or malformed data).
"""

from datetime import date

import pytest

from todo_recurrence import const
from todo_recurrence.recurrence_rules import (
    Annually,
    Astronomical,
    Biweekly,
    Daily,
    EveryXDays,
    InvalidConfigurationError,
    MonthlyDate,
    MonthlyDay,
    NotRecurring,
    ScheduleAnchor,
    Weekly,
)
from todo_recurrence.recurrence_spec import (
    RECURRENCE_SPECS,
    build_recurrence_rule,
    find_missing_fields,
    get_offset_supported_types,
    get_recurrence_spec,
    normalize_recurrence_type,
    required_fields,
    supports_offset,
    validate_recurrence_config,
)

# =============================================================================
# Specification table
# =============================================================================


class TestSpecificationTable:
    """RECURRENCE_SPECS lookups."""

    def test_every_type_has_a_spec(self) -> None:
        """All 14 recurrence types plus none are documented."""
        assert set(RECURRENCE_SPECS) == set(const.RECURRENCE_TYPES)
        assert len(RECURRENCE_SPECS) == 15

    @pytest.mark.parametrize(
        ("recurrence_type", "mode"),
        [
            (const.RECURRENCE_TYPE_DAILY, const.CALCULATION_MODE_FROM_COMPLETION_DATE),
            (const.RECURRENCE_TYPE_WEEKLY, const.CALCULATION_MODE_FROM_COMPLETION_DATE),
            (const.RECURRENCE_TYPE_BIWEEKLY, const.CALCULATION_MODE_ANCHORED_TO_SCHEDULE),
            (const.RECURRENCE_TYPE_MONTHLY_DAY, const.CALCULATION_MODE_CALENDAR_BASED),
            (const.RECURRENCE_TYPE_ANNUALLY, const.CALCULATION_MODE_CALENDAR_BASED),
            (const.RECURRENCE_TYPE_NEW_MOON, const.CALCULATION_MODE_ASTRONOMICAL),
            (const.RECURRENCE_TYPE_EVERY_SEASON, const.CALCULATION_MODE_ASTRONOMICAL),
        ],
    )
    def test_calculation_modes(self, recurrence_type: str, mode: str) -> None:
        """Each type maps to its calculation mode."""
        assert get_recurrence_spec(recurrence_type).calculation_mode == mode

    def test_required_fields(self) -> None:
        """Required fields per type."""
        assert required_fields(const.RECURRENCE_TYPE_DAILY) == set()
        assert required_fields(const.RECURRENCE_TYPE_EVERY_X_DAYS) == {
            const.DATA_TASK_RECURRENCE_INTERVAL
        }
        assert required_fields(const.RECURRENCE_TYPE_MONTHLY_DAY) == {
            const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH,
            const.DATA_TASK_RECURRENCE_DAY_OF_WEEK_MONTHLY,
        }
        assert required_fields(const.RECURRENCE_TYPE_ANNUALLY) == {
            const.DATA_TASK_RECURRENCE_MONTH,
            const.DATA_TASK_RECURRENCE_DAY_OF_MONTH,
        }
        assert required_fields(const.RECURRENCE_TYPE_FULL_MOON) == set()

    def test_offset_support(self) -> None:
        """Only calendar and astronomical types take an offset."""
        assert not supports_offset(const.RECURRENCE_TYPE_DAILY)
        assert not supports_offset(const.RECURRENCE_TYPE_BIWEEKLY)
        assert supports_offset(const.RECURRENCE_TYPE_MONTHLY_DATE)
        assert supports_offset(const.RECURRENCE_TYPE_WINTER_SOLSTICE)

        offset_types = set(get_offset_supported_types())
        assert offset_types == {
            const.RECURRENCE_TYPE_MONTHLY_DATE,
            const.RECURRENCE_TYPE_MONTHLY_DAY,
            const.RECURRENCE_TYPE_ANNUALLY,
            *const.ASTRONOMICAL_RECURRENCE_TYPES,
        }

    def test_drift_only_for_completion_counted_types(self) -> None:
        """Daily and every-x-days drift; nothing else does."""
        drifting = {t for t, spec in RECURRENCE_SPECS.items() if spec.should_drift}
        assert drifting == {
            const.RECURRENCE_TYPE_DAILY,
            const.RECURRENCE_TYPE_EVERY_X_DAYS,
        }

    def test_every_entry_has_examples(self) -> None:
        """Each entry documents worked examples."""
        for spec in RECURRENCE_SPECS.values():
            assert spec.examples
            assert all(isinstance(example, str) for example in spec.examples)


class TestNormalizeRecurrenceType:
    """Type name normalization."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("every x days", const.RECURRENCE_TYPE_EVERY_X_DAYS),
            ("full moon", const.RECURRENCE_TYPE_FULL_MOON),
            ("Monthly_Date", const.RECURRENCE_TYPE_MONTHLY_DATE),
            (" weekly ", const.RECURRENCE_TYPE_WEEKLY),
            ("", const.RECURRENCE_TYPE_NONE),
            (None, const.RECURRENCE_TYPE_NONE),
        ],
    )
    def test_normalizes_legacy_names(self, value: str | None, expected: str) -> None:
        """Legacy spaced names map to canonical names."""
        assert normalize_recurrence_type(value) == expected

    def test_unknown_type_raises(self) -> None:
        """Unknown names fail closed."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            normalize_recurrence_type("fortnightly")

        assert exc_info.value.field == const.DATA_TASK_RECURRENCE_TYPE

    @pytest.mark.parametrize("value", [5, 1.5, ["weekly"]])
    def test_non_string_type_raises(self, value: object) -> None:
        """A non-string type tag is a configuration error."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            normalize_recurrence_type(value)

        assert exc_info.value.field == const.DATA_TASK_RECURRENCE_TYPE


# =============================================================================
# Structural validation
# =============================================================================


class TestValidateRecurrenceConfig:
    """Required-field presence checks."""

    def test_weekly_missing_day_of_week(self) -> None:
        """weekly with day of week None is invalid."""
        config = {const.DATA_TASK_RECURRENCE_DAY_OF_WEEK: None}

        with pytest.raises(InvalidConfigurationError) as exc_info:
            validate_recurrence_config(const.RECURRENCE_TYPE_WEEKLY, config)

        assert exc_info.value.field == const.DATA_TASK_RECURRENCE_DAY_OF_WEEK
        assert exc_info.value.recurrence_type == const.RECURRENCE_TYPE_WEEKLY

    def test_reports_first_missing_field(self) -> None:
        """Fields are reported in declaration order."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            validate_recurrence_config(const.RECURRENCE_TYPE_ANNUALLY, {})

        assert exc_info.value.field == const.DATA_TASK_RECURRENCE_MONTH
        assert find_missing_fields(const.RECURRENCE_TYPE_ANNUALLY, {}) == [
            const.DATA_TASK_RECURRENCE_MONTH,
            const.DATA_TASK_RECURRENCE_DAY_OF_MONTH,
        ]

    def test_complete_config_passes(self) -> None:
        """No exception when every required field is present."""
        validate_recurrence_config(
            const.RECURRENCE_TYPE_MONTHLY_DAY,
            {
                const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH: 2,
                const.DATA_TASK_RECURRENCE_DAY_OF_WEEK_MONTHLY: 2,
            },
        )

    def test_types_without_fields_always_pass(self) -> None:
        """Astronomical types need no configuration."""
        validate_recurrence_config(const.RECURRENCE_TYPE_EVERY_SEASON, {})


# =============================================================================
# Parsing into rule variants
# =============================================================================


class TestBuildRecurrenceRule:
    """Loosely typed records -> rule variants."""

    def test_none_is_not_recurring(self) -> None:
        """Type none parses to NotRecurring."""
        assert build_recurrence_rule(const.RECURRENCE_TYPE_NONE, {}) == NotRecurring()
        assert build_recurrence_rule(None, {}) == NotRecurring()

    def test_daily(self) -> None:
        """Daily needs no fields."""
        assert build_recurrence_rule("daily", {}) == Daily()

    def test_every_x_days_coerces_string_interval(self) -> None:
        """Stored numbers may arrive as strings."""
        rule = build_recurrence_rule(
            "every x days", {const.DATA_TASK_RECURRENCE_INTERVAL: "3"}
        )

        assert rule == EveryXDays(interval=3)

    def test_weekly_and_biweekly(self) -> None:
        """Weekday-based types."""
        config = {const.DATA_TASK_RECURRENCE_DAY_OF_WEEK: 7}

        assert build_recurrence_rule("weekly", config) == Weekly(day_of_week=7)
        assert build_recurrence_rule("biweekly", config) == Biweekly(day_of_week=7)

    def test_monthly_day_last_week(self) -> None:
        """-1 selects the last matching weekday."""
        rule = build_recurrence_rule(
            const.RECURRENCE_TYPE_MONTHLY_DAY,
            {
                const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH: -1,
                const.DATA_TASK_RECURRENCE_DAY_OF_WEEK_MONTHLY: 5,
            },
        )

        assert rule == MonthlyDay(week_of_month=-1, day_of_week=5)

    def test_annually(self) -> None:
        """Month and day of month."""
        rule = build_recurrence_rule(
            const.RECURRENCE_TYPE_ANNUALLY,
            {
                const.DATA_TASK_RECURRENCE_MONTH: 2,
                const.DATA_TASK_RECURRENCE_DAY_OF_MONTH: 29,
            },
        )

        assert rule == Annually(month=2, day_of_month=29)

    @pytest.mark.parametrize("recurrence_type", const.ASTRONOMICAL_RECURRENCE_TYPES)
    def test_astronomical(self, recurrence_type: str) -> None:
        """Astronomical types carry only their type name."""
        assert build_recurrence_rule(recurrence_type, {}) == Astronomical(
            recurrence_type
        )

    @pytest.mark.parametrize(
        ("recurrence_type", "config", "field"),
        [
            (
                const.RECURRENCE_TYPE_EVERY_X_DAYS,
                {const.DATA_TASK_RECURRENCE_INTERVAL: 2.9},
                const.DATA_TASK_RECURRENCE_INTERVAL,
            ),
            (
                const.RECURRENCE_TYPE_WEEKLY,
                {const.DATA_TASK_RECURRENCE_DAY_OF_WEEK: True},
                const.DATA_TASK_RECURRENCE_DAY_OF_WEEK,
            ),
            (
                const.RECURRENCE_TYPE_MONTHLY_DATE,
                {const.DATA_TASK_RECURRENCE_DAY_OF_MONTH: "15.5"},
                const.DATA_TASK_RECURRENCE_DAY_OF_MONTH,
            ),
        ],
    )
    def test_bools_and_fractions_are_not_truncated(
        self, recurrence_type: str, config: dict, field: str
    ) -> None:
        """No silent rounding or bool-to-int conversion."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            build_recurrence_rule(recurrence_type, config)

        assert exc_info.value.field == field

    def test_integral_values_are_accepted(self) -> None:
        """Integer-valued strings and floats are exact, so they pass."""
        assert build_recurrence_rule(
            const.RECURRENCE_TYPE_MONTHLY_DATE,
            {const.DATA_TASK_RECURRENCE_DAY_OF_MONTH: "15"},
        ) == MonthlyDate(day_of_month=15)
        assert build_recurrence_rule(
            const.RECURRENCE_TYPE_EVERY_X_DAYS,
            {const.DATA_TASK_RECURRENCE_INTERVAL: 3.0},
        ) == EveryXDays(interval=3)

    def test_weekly_null_day_of_week_raises(self) -> None:
        """No date is produced from an incomplete weekly record."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            build_recurrence_rule(
                "weekly", {const.DATA_TASK_RECURRENCE_DAY_OF_WEEK: None}
            )

        assert exc_info.value.field == const.DATA_TASK_RECURRENCE_DAY_OF_WEEK

    @pytest.mark.parametrize(
        ("recurrence_type", "config", "field"),
        [
            (
                const.RECURRENCE_TYPE_WEEKLY,
                {const.DATA_TASK_RECURRENCE_DAY_OF_WEEK: 8},
                const.DATA_TASK_RECURRENCE_DAY_OF_WEEK,
            ),
            (
                const.RECURRENCE_TYPE_WEEKLY,
                {const.DATA_TASK_RECURRENCE_DAY_OF_WEEK: "monday"},
                const.DATA_TASK_RECURRENCE_DAY_OF_WEEK,
            ),
            (
                const.RECURRENCE_TYPE_EVERY_X_DAYS,
                {const.DATA_TASK_RECURRENCE_INTERVAL: 0},
                const.DATA_TASK_RECURRENCE_INTERVAL,
            ),
            (
                const.RECURRENCE_TYPE_MONTHLY_DATE,
                {const.DATA_TASK_RECURRENCE_DAY_OF_MONTH: 32},
                const.DATA_TASK_RECURRENCE_DAY_OF_MONTH,
            ),
            (
                const.RECURRENCE_TYPE_MONTHLY_DAY,
                {
                    const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH: 4,
                    const.DATA_TASK_RECURRENCE_DAY_OF_WEEK_MONTHLY: 2,
                },
                const.DATA_TASK_RECURRENCE_WEEK_OF_MONTH,
            ),
            (
                const.RECURRENCE_TYPE_ANNUALLY,
                {
                    const.DATA_TASK_RECURRENCE_MONTH: 13,
                    const.DATA_TASK_RECURRENCE_DAY_OF_MONTH: 1,
                },
                const.DATA_TASK_RECURRENCE_MONTH,
            ),
        ],
    )
    def test_out_of_range_values_raise(
        self, recurrence_type: str, config: dict, field: str
    ) -> None:
        """Coercion and range checks name the offending field."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            build_recurrence_rule(recurrence_type, config)

        assert exc_info.value.field == field
        assert exc_info.value.recurrence_type == recurrence_type


# =============================================================================
# Rule variants and anchors
# =============================================================================


class TestRuleVariants:
    """Variants cannot be built with invalid fields."""

    def test_weekly_rejects_none(self) -> None:
        """Direct construction is checked too."""
        with pytest.raises(InvalidConfigurationError):
            Weekly(day_of_week=None)

    def test_monthly_date_rejects_bool(self) -> None:
        """Booleans are not integers here."""
        with pytest.raises(InvalidConfigurationError):
            MonthlyDate(day_of_month=True)

    def test_astronomical_rejects_calendar_type(self) -> None:
        """Only the seven astronomical types are accepted."""
        with pytest.raises(InvalidConfigurationError):
            Astronomical(const.RECURRENCE_TYPE_MONTHLY_DATE)

    def test_variants_are_hashable_and_frozen(self) -> None:
        """Rules are immutable values."""
        rule = EveryXDays(interval=2)

        assert {rule, EveryXDays(interval=2)} == {rule}
        with pytest.raises(AttributeError):
            rule.interval = 5  # type: ignore[misc]


class TestScheduleAnchor:
    """Stored anchor parsing."""

    def test_event_date_prefers_due_date(self) -> None:
        """due_date when set, else display_date."""
        anchor = ScheduleAnchor(display_date=date(2026, 1, 12), due_date=date(2026, 1, 15))

        assert anchor.event_date == date(2026, 1, 15)
        assert ScheduleAnchor(display_date=date(2026, 1, 12)).event_date == date(
            2026, 1, 12
        )
        assert ScheduleAnchor().event_date is None

    def test_from_iso(self) -> None:
        """ISO strings and empty values."""
        anchor = ScheduleAnchor.from_iso("2026-01-05", None)

        assert anchor == ScheduleAnchor(display_date=date(2026, 1, 5))
        assert ScheduleAnchor.from_iso("", "") == ScheduleAnchor()

    def test_from_iso_malformed_raises(self) -> None:
        """A stored date that cannot be parsed fails closed."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            ScheduleAnchor.from_iso("2026-13-40", None, const.RECURRENCE_TYPE_DAILY)

        assert exc_info.value.field == const.DATA_TASK_DISPLAY_DATE
