"""Calculation engines for todo-recurrence.

Submodules:
    - schedule_engine: RecurrenceEngine and the storage-facing entry point
    - astronomy_engine: AstronomicalEventSource contract and PyEphem adapter
"""
