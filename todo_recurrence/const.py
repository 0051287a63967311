# File: const.py
"""Constants for the todo-recurrence engine.

This file centralizes recurrence type names, calculation modes, storage keys,
astronomical event kinds, and defaults for consistency across the package.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# Safety limit for date calculations
MAX_DATE_CALCULATION_ITERATIONS = 100

# ------------------------------------------------------------------------------------------------
# Recurrence Types
# ------------------------------------------------------------------------------------------------
RECURRENCE_TYPE_NONE = "none"
RECURRENCE_TYPE_DAILY = "daily"
RECURRENCE_TYPE_EVERY_X_DAYS = "every-x-days"
RECURRENCE_TYPE_WEEKLY = "weekly"
RECURRENCE_TYPE_BIWEEKLY = "biweekly"
RECURRENCE_TYPE_MONTHLY_DATE = "monthly-date"
RECURRENCE_TYPE_MONTHLY_DAY = "monthly-day"
RECURRENCE_TYPE_ANNUALLY = "annually"
RECURRENCE_TYPE_FULL_MOON = "full-moon"
RECURRENCE_TYPE_NEW_MOON = "new-moon"
RECURRENCE_TYPE_EVERY_SEASON = "every-season"
RECURRENCE_TYPE_WINTER_SOLSTICE = "winter-solstice"
RECURRENCE_TYPE_SPRING_EQUINOX = "spring-equinox"
RECURRENCE_TYPE_SUMMER_SOLSTICE = "summer-solstice"
RECURRENCE_TYPE_AUTUMN_EQUINOX = "autumn-equinox"

RECURRENCE_TYPES = [
    RECURRENCE_TYPE_NONE,
    RECURRENCE_TYPE_DAILY,
    RECURRENCE_TYPE_EVERY_X_DAYS,
    RECURRENCE_TYPE_WEEKLY,
    RECURRENCE_TYPE_BIWEEKLY,
    RECURRENCE_TYPE_MONTHLY_DATE,
    RECURRENCE_TYPE_MONTHLY_DAY,
    RECURRENCE_TYPE_ANNUALLY,
    RECURRENCE_TYPE_FULL_MOON,
    RECURRENCE_TYPE_NEW_MOON,
    RECURRENCE_TYPE_EVERY_SEASON,
    RECURRENCE_TYPE_WINTER_SOLSTICE,
    RECURRENCE_TYPE_SPRING_EQUINOX,
    RECURRENCE_TYPE_SUMMER_SOLSTICE,
    RECURRENCE_TYPE_AUTUMN_EQUINOX,
]

MOON_RECURRENCE_TYPES = [
    RECURRENCE_TYPE_FULL_MOON,
    RECURRENCE_TYPE_NEW_MOON,
]

ASTRONOMICAL_RECURRENCE_TYPES = [
    *MOON_RECURRENCE_TYPES,
    RECURRENCE_TYPE_EVERY_SEASON,
    RECURRENCE_TYPE_SPRING_EQUINOX,
    RECURRENCE_TYPE_SUMMER_SOLSTICE,
    RECURRENCE_TYPE_AUTUMN_EQUINOX,
    RECURRENCE_TYPE_WINTER_SOLSTICE,
]

# ------------------------------------------------------------------------------------------------
# Calculation Modes
# ------------------------------------------------------------------------------------------------
CALCULATION_MODE_FROM_COMPLETION_DATE = "from-completion-date"
CALCULATION_MODE_ANCHORED_TO_SCHEDULE = "anchored-to-schedule"
CALCULATION_MODE_CALENDAR_BASED = "calendar-based"
CALCULATION_MODE_ASTRONOMICAL = "astronomical"

# ------------------------------------------------------------------------------------------------
# Astronomical Event Kinds
# ------------------------------------------------------------------------------------------------
EVENT_FULL_MOON = "full_moon"
EVENT_NEW_MOON = "new_moon"
EVENT_SPRING_EQUINOX = "spring_equinox"
EVENT_SUMMER_SOLSTICE = "summer_solstice"
EVENT_AUTUMN_EQUINOX = "autumn_equinox"
EVENT_WINTER_SOLSTICE = "winter_solstice"

SEASON_EVENTS = [
    EVENT_SPRING_EQUINOX,
    EVENT_SUMMER_SOLSTICE,
    EVENT_AUTUMN_EQUINOX,
    EVENT_WINTER_SOLSTICE,
]

RECURRENCE_TYPE_TO_EVENT = {
    RECURRENCE_TYPE_FULL_MOON: EVENT_FULL_MOON,
    RECURRENCE_TYPE_NEW_MOON: EVENT_NEW_MOON,
    RECURRENCE_TYPE_SPRING_EQUINOX: EVENT_SPRING_EQUINOX,
    RECURRENCE_TYPE_SUMMER_SOLSTICE: EVENT_SUMMER_SOLSTICE,
    RECURRENCE_TYPE_AUTUMN_EQUINOX: EVENT_AUTUMN_EQUINOX,
    RECURRENCE_TYPE_WINTER_SOLSTICE: EVENT_WINTER_SOLSTICE,
}

# Moon phases repeat every ~29.5 days
MOON_SEARCH_WINDOW_DAYS = 40

# ------------------------------------------------------------------------------------------------
# Task Record Keys (storage format)
# ------------------------------------------------------------------------------------------------
DATA_TASK_IS_RECURRING = "is_recurring"
DATA_TASK_RECURRENCE_TYPE = "recurrence_type"
DATA_TASK_RECURRENCE_INTERVAL = "recurrence_interval"
DATA_TASK_RECURRENCE_DAY_OF_WEEK = "recurrence_day_of_week"
DATA_TASK_RECURRENCE_DAY_OF_MONTH = "recurrence_day_of_month"
DATA_TASK_RECURRENCE_WEEK_OF_MONTH = "recurrence_week_of_month"
DATA_TASK_RECURRENCE_DAY_OF_WEEK_MONTHLY = "recurrence_day_of_week_monthly"
DATA_TASK_RECURRENCE_MONTH = "recurrence_month"
DATA_TASK_DISPLAY_DATE = "display_date"
DATA_TASK_DUE_DATE = "due_date"
DATA_TASK_DISPLAY_DATE_OFFSET = "display_date_offset"

# ------------------------------------------------------------------------------------------------
# Weekdays (ISO ordinals, 1=Monday..7=Sunday)
# ------------------------------------------------------------------------------------------------
WEEKDAY_MONDAY = 1
WEEKDAY_SUNDAY = 7

# Week-of-month values; -1 selects the last matching weekday
WEEK_OF_MONTH_LAST = -1
WEEK_OF_MONTH_OPTIONS = [1, 2, 3, WEEK_OF_MONTH_LAST]

# Biweekly cadence
BIWEEKLY_INTERVAL_DAYS = 14

# RFC 5545 weekday codes indexed by ISO weekday - 1
RRULE_WEEKDAY_CODES = ["MO", "TU", "WE", "TH", "FR", "SA", "SU"]

# Months after which the day-of-month can need clamping
MIN_DAYS_IN_MONTH = 28

# ------------------------------------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------------------------------------
CONF_DAY_BOUNDARY_HOUR = "day_boundary_hour"
CONF_TIMEZONE = "timezone"

ENV_DAY_BOUNDARY_HOUR = "TODO_RECURRENCE_DAY_BOUNDARY_HOUR"
ENV_TIMEZONE = "TODO_RECURRENCE_TIMEZONE"

DEFAULT_DAY_BOUNDARY_HOUR = 0  # Midnight
DEFAULT_TIMEZONE = "America/New_York"
