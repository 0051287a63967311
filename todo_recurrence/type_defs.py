"""Type definitions for todo-recurrence data structures.

TypedDicts describe the loosely typed task record exchanged with the storage
layer. They are STATIC ANALYSIS ONLY: every field may be missing or None at
runtime, which is why the record is parsed by recurrence_spec before any
calculation happens.

IMPORTANT: This file must NOT import from engines/ to avoid circular imports.
"""

from typing import TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
RecurrenceTypeName = str  # RECURRENCE_TYPE_* constant from const.py
IsoWeekday = int  # 1=Monday .. 7=Sunday


class TaskRecurrenceData(TypedDict, total=False):
    """Stored recurrence fields of a task record.

    All fields are optional (total=False); recurrence configuration fields are
    nullable at the storage boundary.
    """

    is_recurring: bool
    recurrence_type: RecurrenceTypeName | None
    recurrence_interval: int | None
    recurrence_day_of_week: IsoWeekday | None
    recurrence_day_of_month: int | None
    recurrence_week_of_month: int | None
    recurrence_day_of_week_monthly: IsoWeekday | None
    recurrence_month: int | None
    display_date: ISODate | None
    due_date: ISODate | None
    display_date_offset: int | None


class RecurrenceDates(TypedDict):
    """Output of a recurrence calculation, ready to persist on the task."""

    display_date: ISODate | None
    due_date: ISODate | None
