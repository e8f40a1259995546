"""Availability oracles: who is busy when, on a given day.

Availability is an enhancement, never a precondition for scheduling. An
oracle never raises: a missing credential reports ``connected=False`` and an
upstream failure reports no known conflicts (fail-open).
"""

from __future__ import annotations

import logging
from datetime import date

from interview_scheduler.errors import CalendarNotConnected, IntegrationWarning
from interview_scheduler.schemas import AvailabilityResult
from interview_scheduler.slots import day_bounds
from interview_scheduler.tools.google_calendar import GoogleCalendarClient

log = logging.getLogger(__name__)


class AvailabilityOracle:
    """Null-object oracle: no calendar, so no known conflicts."""

    async def is_connected(self, user_id: str) -> bool:
        return False

    async def busy_for_day(self, user_id: str, day: date) -> AvailabilityResult:
        return AvailabilityResult(connected=False)


NullAvailability = AvailabilityOracle


class CalendarAvailability(AvailabilityOracle):
    def __init__(self, calendar: GoogleCalendarClient) -> None:
        self.calendar = calendar

    async def is_connected(self, user_id: str) -> bool:
        status = await self.calendar.check_connection(user_id)
        return bool(status["connected"])

    async def busy_for_day(self, user_id: str, day: date) -> AvailabilityResult:
        time_min, time_max = day_bounds(day, self.calendar.config.tzinfo)
        try:
            busy = await self.calendar.free_busy(user_id, time_min, time_max)
        except CalendarNotConnected as e:
            log.info("No calendar for user %s: %s", user_id, e.message)
            return AvailabilityResult(connected=False)
        except IntegrationWarning as e:
            log.warning("Availability lookup failed for %s on %s, assuming no conflicts: %s", user_id, day, e)
            return AvailabilityResult(connected=True, degraded=True)
        return AvailabilityResult(connected=True, busy=busy)
