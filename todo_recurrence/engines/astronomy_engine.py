"""Astronomical event source for todo-recurrence.

Defines the two query contracts the recurrence calculator needs:
- next_event_after(kind, start, window_days) -> instant or None
- seasons_of_year(year) -> the four equinox/solstice instants

`EphemEventSource` answers them with PyEphem. Tests substitute a fake source
with fixed instants, so the calculator never depends on real ephemerides.

All instants are timezone-aware UTC datetimes. Turning an instant into a
calendar date is the caller's job.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import NamedTuple, Protocol

import ephem

from .. import const
from ..recurrence_rules import RecurrenceError
from ..utils.dt_utils import as_utc


class NoOccurrenceFoundError(RecurrenceError):
    """The astronomical search exhausted its window without a match.

    Attributes:
        event_kind: EVENT_* constant that was searched for
        search_start: Instant the search started from
    """

    def __init__(self, event_kind: str, search_start: datetime | None = None) -> None:
        """Initialize NoOccurrenceFoundError.

        Args:
            event_kind: EVENT_* constant that was searched for
            search_start: Instant the search started from
        """
        self.event_kind = event_kind
        self.search_start = search_start
        super().__init__(f"No {event_kind} found after {search_start}")


class SeasonInstants(NamedTuple):
    """The four season-change instants of one year (UTC)."""

    spring_equinox: datetime
    summer_solstice: datetime
    autumn_equinox: datetime
    winter_solstice: datetime

    def for_event(self, event_kind: str) -> datetime:
        """Return the instant for one of the EVENT_* season kinds."""
        return getattr(self, event_kind)


class AstronomicalEventSource(Protocol):
    """Black-box oracle for celestial events.

    Implementations must be pure functions of their arguments.
    """

    def next_event_after(
        self,
        event_kind: str,
        search_start: datetime,
        search_window_days: int,
    ) -> datetime | None:
        """Return the first `event_kind` instant after `search_start`.

        Returns None when no event occurs within `search_window_days`.
        """

    def seasons_of_year(self, year: int) -> SeasonInstants:
        """Return the equinox and solstice instants of `year`."""


class EphemEventSource:
    """AstronomicalEventSource backed by PyEphem."""

    _NEXT_EVENT = {
        const.EVENT_FULL_MOON: ephem.next_full_moon,
        const.EVENT_NEW_MOON: ephem.next_new_moon,
        const.EVENT_SPRING_EQUINOX: ephem.next_vernal_equinox,
        const.EVENT_SUMMER_SOLSTICE: ephem.next_summer_solstice,
        const.EVENT_AUTUMN_EQUINOX: ephem.next_autumnal_equinox,
        const.EVENT_WINTER_SOLSTICE: ephem.next_winter_solstice,
    }

    def next_event_after(
        self,
        event_kind: str,
        search_start: datetime,
        search_window_days: int = const.MOON_SEARCH_WINDOW_DAYS,
    ) -> datetime | None:
        """Return the next event instant after `search_start`, or None.

        Raises:
            ValueError: unknown event kind.
        """
        finder = self._NEXT_EVENT.get(event_kind)
        if finder is None:
            raise ValueError(f"Unknown astronomical event kind: {event_kind}")

        start_utc = as_utc(search_start)
        found = self._to_utc(finder(self._to_ephem(start_utc)))

        if found - start_utc > timedelta(days=search_window_days):
            const.LOGGER.debug(
                "EphemEventSource: %s at %s is outside %d-day window from %s",
                event_kind,
                found,
                search_window_days,
                start_utc,
            )
            return None
        return found

    def seasons_of_year(self, year: int) -> SeasonInstants:
        """Return the four season-change instants of `year`."""
        new_year = self._to_ephem(datetime(year, 1, 1, tzinfo=UTC))
        return SeasonInstants(
            spring_equinox=self._to_utc(ephem.next_vernal_equinox(new_year)),
            summer_solstice=self._to_utc(ephem.next_summer_solstice(new_year)),
            autumn_equinox=self._to_utc(ephem.next_autumnal_equinox(new_year)),
            winter_solstice=self._to_utc(ephem.next_winter_solstice(new_year)),
        )

    @staticmethod
    def _to_ephem(instant: datetime) -> ephem.Date:
        # PyEphem works in naive UTC
        return ephem.Date(as_utc(instant).replace(tzinfo=None))

    @staticmethod
    def _to_utc(value: ephem.Date) -> datetime:
        return value.datetime().replace(tzinfo=UTC)
