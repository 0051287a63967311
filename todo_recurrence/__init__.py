"""Recurrence calculation engine for a todo application.

Given a task's recurrence configuration, the dates of its previous
occurrence and the current instant, computes the next display/due dates.
"""

from .config import RecurrenceSettings, load_settings
from .engines.astronomy_engine import (
    AstronomicalEventSource,
    EphemEventSource,
    NoOccurrenceFoundError,
    SeasonInstants,
)
from .engines.schedule_engine import (
    RecurrenceEngine,
    calculate_next_recurrence,
    calculate_next_recurrence_from_fields,
    to_rrule_string,
)
from .recurrence_rules import (
    Annually,
    Astronomical,
    Biweekly,
    Daily,
    EveryXDays,
    InvalidConfigurationError,
    MonthlyDate,
    MonthlyDay,
    NotRecurring,
    RecurrenceError,
    RecurrenceResult,
    RecurrenceRule,
    ScheduleAnchor,
    Weekly,
)
from .recurrence_spec import (
    RECURRENCE_SPECS,
    build_recurrence_rule,
    get_recurrence_spec,
    validate_recurrence_config,
)

__all__ = [
    "RECURRENCE_SPECS",
    "Annually",
    "AstronomicalEventSource",
    "Astronomical",
    "Biweekly",
    "Daily",
    "EphemEventSource",
    "EveryXDays",
    "InvalidConfigurationError",
    "MonthlyDate",
    "MonthlyDay",
    "NoOccurrenceFoundError",
    "NotRecurring",
    "RecurrenceEngine",
    "RecurrenceError",
    "RecurrenceResult",
    "RecurrenceRule",
    "RecurrenceSettings",
    "ScheduleAnchor",
    "SeasonInstants",
    "Weekly",
    "build_recurrence_rule",
    "calculate_next_recurrence",
    "calculate_next_recurrence_from_fields",
    "get_recurrence_spec",
    "load_settings",
    "to_rrule_string",
    "validate_recurrence_config",
]
