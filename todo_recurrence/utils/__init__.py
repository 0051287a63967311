# File: utils/__init__.py
"""Pure Python utilities for todo-recurrence.

Submodules:
    - dt_utils: Calendar arithmetic, weekday search, day-boundary resolution

Usage:
    from .utils import dt_utils
    from .utils.dt_utils import dt_logical_today
"""

from . import dt_utils

__all__ = ["dt_utils"]
