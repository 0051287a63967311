"""Shared fixtures for todo-recurrence tests."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from todo_recurrence import const
from todo_recurrence.engines.astronomy_engine import SeasonInstants
from todo_recurrence.engines.schedule_engine import RecurrenceEngine


def make_utc_dt(
    year: int, month: int, day: int, hour: int = 12, minute: int = 0
) -> datetime:
    """Create a UTC datetime for testing."""
    return datetime(year, month, day, hour, minute, 0, tzinfo=UTC)


# Approximate 2026 lunar phases (UTC), rounded to noon
FULL_MOONS = [
    make_utc_dt(2026, month, day)
    for month, day in (
        (1, 3), (2, 1), (3, 3), (4, 2), (5, 1), (5, 31), (6, 29),
        (7, 29), (8, 28), (9, 26), (10, 26), (11, 24), (12, 24),
    )
]
NEW_MOONS = [
    make_utc_dt(2026, month, day)
    for month, day in (
        (1, 18), (2, 17), (3, 19), (4, 17), (5, 16), (6, 15), (7, 14),
        (8, 12), (9, 11), (10, 10), (11, 9), (12, 9),
    )
]

SEASONS = {
    2025: SeasonInstants(
        spring_equinox=make_utc_dt(2025, 3, 20, 9, 1),
        summer_solstice=make_utc_dt(2025, 6, 21, 2, 42),
        autumn_equinox=make_utc_dt(2025, 9, 22, 18, 19),
        winter_solstice=make_utc_dt(2025, 12, 21, 15, 3),
    ),
    2026: SeasonInstants(
        spring_equinox=make_utc_dt(2026, 3, 20, 14, 46),
        summer_solstice=make_utc_dt(2026, 6, 21, 8, 24),
        autumn_equinox=make_utc_dt(2026, 9, 23, 0, 5),
        winter_solstice=make_utc_dt(2026, 12, 21, 20, 50),
    ),
    2027: SeasonInstants(
        spring_equinox=make_utc_dt(2027, 3, 20, 20, 25),
        summer_solstice=make_utc_dt(2027, 6, 21, 14, 11),
        autumn_equinox=make_utc_dt(2027, 9, 23, 6, 1),
        winter_solstice=make_utc_dt(2027, 12, 22, 2, 42),
    ),
}


class FakeEventSource:
    """Deterministic AstronomicalEventSource backed by fixed instants."""

    def __init__(
        self,
        events: dict[str, list[datetime]] | None = None,
        seasons: dict[int, SeasonInstants] | None = None,
    ) -> None:
        self.events = (
            events
            if events is not None
            else {const.EVENT_FULL_MOON: FULL_MOONS, const.EVENT_NEW_MOON: NEW_MOONS}
        )
        self.seasons = seasons if seasons is not None else SEASONS
        self.calls: list[tuple[str, datetime, int]] = []

    def next_event_after(
        self, event_kind: str, search_start: datetime, search_window_days: int
    ) -> datetime | None:
        self.calls.append((event_kind, search_start, search_window_days))
        for instant in sorted(self.events.get(event_kind, [])):
            if instant > search_start:
                if instant - search_start > timedelta(days=search_window_days):
                    return None
                return instant
        return None

    def seasons_of_year(self, year: int) -> SeasonInstants:
        return self.seasons[year]


@pytest.fixture
def event_source() -> FakeEventSource:
    """Return a fake astronomical source with 2025-2027 data."""
    return FakeEventSource()


@pytest.fixture
def engine(event_source: FakeEventSource) -> RecurrenceEngine:
    """Return a RecurrenceEngine reading astronomical dates in UTC."""
    return RecurrenceEngine(event_source=event_source)


@pytest.fixture
def new_york_tz() -> ZoneInfo:
    """Return the default settings timezone."""
    return ZoneInfo("America/New_York")


def d(value: str) -> date:
    """Shorthand for an ISO calendar date."""
    return date.fromisoformat(value)
