"""
Core business logic for generating bookable appointment slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O). Every caller
that offers start times to a customer (booking wizard, chat bot,
reschedule dialog, package scheduler) goes through ``generate_slots``.
"""

import logging
from datetime import date, datetime, time
from enum import Enum
from typing import Iterator, List, Optional

import pendulum

from .exceptions import ConfigurationError
from .models import BusinessCalendar, ServiceSpec
from .timekeeping import localize

logger = logging.getLogger(__name__)

# Tolerance, in hours, for the decimal-hour closing comparison
EPSILON_HOURS = 0.001


class EmptyReason(str, Enum):
    """Why a day offers no slots, for callers that want to tell the customer."""
    CLOSED_DAY = "closed_day"
    PAST_DAY = "past_day"
    NO_MORE_SLOTS_TODAY = "no_more_slots_today"
    SERVICE_TOO_LONG = "service_too_long"


class SlotGenerator:
    """
    Generates the start times a service can be booked at on one day.

    Algorithm:
    1. Closed weekdays yield nothing
    2. Walk candidates from opening time in ``slot_interval_minutes`` steps
    3. Stop once a service started at the candidate would end after closing
    4. On the current day, drop candidates inside the minimum lead time
    5. Return the survivors in ascending order
    """

    def __init__(self, calendar: BusinessCalendar):
        self.calendar = calendar

    def generate(self, day: date, service: ServiceSpec, now: datetime) -> List[time]:
        """
        Compute the bookable start times for ``service`` on ``day``.

        Args:
            day: Calendar day in the salon's local time
            service: Service to be booked
            now: Current moment, injected by the caller

        Returns:
            Ordered list of start times, possibly empty
        """
        duration = self._validated_duration(service)

        if not self.calendar.is_working_day(day):
            logger.debug("%s is not a working day", day)
            return []

        earliest = self._earliest_start(day, now)
        slots = [
            candidate
            for candidate in self._walk_candidates(duration)
            if earliest is None or self.calendar.at(day, candidate) >= earliest
        ]

        logger.debug(
            "Generated %d slot(s) for service %s on %s", len(slots), service.id, day
        )
        return slots

    def explain_empty(
        self, day: date, service: ServiceSpec, now: datetime
    ) -> Optional[EmptyReason]:
        """
        Tell why ``generate`` returns nothing for this day.

        Returns None when the day does have slots.
        """
        if self.generate(day, service, now):
            return None

        if not self.calendar.is_working_day(day):
            return EmptyReason.CLOSED_DAY

        today = localize(now, self.calendar.timezone).date()
        if self._as_date(day) < today:
            return EmptyReason.PAST_DAY

        if not any(True for _ in self._walk_candidates(service.duration_minutes)):
            return EmptyReason.SERVICE_TOO_LONG

        return EmptyReason.NO_MORE_SLOTS_TODAY

    def _walk_candidates(self, duration_minutes: int) -> Iterator[time]:
        """
        Yield start times within business hours that still finish by closing.
        """
        calendar = self.calendar
        last_possible_start = calendar.close_hour - duration_minutes / 60

        minute_of_day = calendar.open_hour * 60
        while minute_of_day < calendar.close_hour * 60:
            hour, minute = divmod(minute_of_day, 60)
            decimal_hour = hour + minute / 60

            # Ending exactly at closing time is allowed
            if decimal_hour > last_possible_start + EPSILON_HOURS:
                break

            yield time(hour=hour, minute=minute)
            minute_of_day += calendar.slot_interval_minutes

    def _earliest_start(self, day: date, now: datetime):
        """
        Earliest bookable start on ``day``, or None when the day is in the future.

        Past days get a bound that excludes every candidate.
        """
        local_now = localize(now, self.calendar.timezone)
        if self._as_date(day) > local_now.date():
            return None
        return local_now.add(minutes=self.calendar.minimum_lead_minutes)

    @staticmethod
    def _validated_duration(service: ServiceSpec) -> int:
        if service.duration_minutes <= 0:
            raise ConfigurationError(
                f"Service {service.id} duration_minutes must be greater than zero, "
                f"got {service.duration_minutes}"
            )
        return service.duration_minutes

    @staticmethod
    def _as_date(day: date):
        return pendulum.date(day.year, day.month, day.day)


def generate_slots(
    calendar: BusinessCalendar, day: date, service: ServiceSpec, now: datetime
) -> List[time]:
    """Module-level shortcut for ``SlotGenerator(calendar).generate(...)``."""
    return SlotGenerator(calendar).generate(day, service, now)


def explain_empty(
    calendar: BusinessCalendar, day: date, service: ServiceSpec, now: datetime
) -> Optional[EmptyReason]:
    """Module-level shortcut for ``SlotGenerator(calendar).explain_empty(...)``."""
    return SlotGenerator(calendar).explain_empty(day, service, now)
