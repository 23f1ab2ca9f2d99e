"""
Domain models for the salon calendar, services and bookings.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

import pendulum
from pendulum import DateTime

from .exceptions import ConfigurationError, InvalidIntervalError
from .timekeeping import compute_end

WEEKDAY_NAMES = {
    0: "Sunday",
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}


def weekday_number(day: date) -> int:
    """Return the weekday of ``day`` numbered 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


class BookingStatus(str, Enum):
    """Lifecycle states of an appointment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def occupies_calendar(self) -> bool:
        """Every status except cancelled blocks the calendar."""
        return self is not BookingStatus.CANCELLED


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Start time {self.start} must be before end time {self.end}"
            )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start:%d.%m.%Y %H:%M} - {self.end:%H:%M}"


@dataclass(frozen=True)
class BusinessCalendar:
    """
    Opening rules of the salon.

    ``working_weekdays`` uses 0=Sunday .. 6=Saturday.
    """
    open_hour: int = 9
    close_hour: int = 18
    working_weekdays: FrozenSet[int] = frozenset({1, 2, 3, 4, 5, 6})
    slot_interval_minutes: int = 30
    minimum_lead_minutes: int = 30
    timezone: str = "America/Sao_Paulo"

    def __post_init__(self):
        # Accept any iterable of weekdays but store an immutable set
        object.__setattr__(self, "working_weekdays", frozenset(self.working_weekdays))

        if not 0 <= self.open_hour <= 23:
            raise ConfigurationError(f"open_hour must be between 0 and 23, got {self.open_hour}")
        if not 1 <= self.close_hour <= 24:
            raise ConfigurationError(f"close_hour must be between 1 and 24, got {self.close_hour}")
        if self.open_hour >= self.close_hour:
            raise ConfigurationError(
                f"open_hour ({self.open_hour}) must be earlier than close_hour ({self.close_hour})"
            )
        invalid_days = sorted(day for day in self.working_weekdays if day not in range(7))
        if invalid_days:
            raise ConfigurationError(f"working_weekdays must be between 0 and 6, got {invalid_days}")
        if self.slot_interval_minutes <= 0:
            raise ConfigurationError(
                f"slot_interval_minutes must be greater than zero, got {self.slot_interval_minutes}"
            )
        if self.minimum_lead_minutes < 0:
            raise ConfigurationError(
                f"minimum_lead_minutes must not be negative, got {self.minimum_lead_minutes}"
            )

    def is_working_day(self, day: date) -> bool:
        """Check if the salon opens on ``day``."""
        return weekday_number(day) in self.working_weekdays

    def at(self, day: date, moment: time) -> DateTime:
        """Return the aware local timestamp of ``moment`` on ``day``."""
        return pendulum.datetime(
            day.year, day.month, day.day, moment.hour, moment.minute, tz=self.timezone
        )

    def opening_time(self, day: date) -> DateTime:
        return pendulum.datetime(day.year, day.month, day.day, self.open_hour, tz=self.timezone)

    def closing_time(self, day: date) -> DateTime:
        if self.close_hour == 24:
            # midnight of the following day
            return pendulum.datetime(day.year, day.month, day.day, tz=self.timezone).add(days=1)
        return pendulum.datetime(day.year, day.month, day.day, self.close_hour, tz=self.timezone)

    def next_working_day(self, day: date) -> date:
        """
        Return the first working day strictly after ``day``.

        Raises:
            ConfigurationError: If the calendar has no working days at all
        """
        if not self.working_weekdays:
            raise ConfigurationError("Calendar has no working weekdays")

        candidate = pendulum.date(day.year, day.month, day.day).add(days=1)
        while not self.is_working_day(candidate):
            candidate = candidate.add(days=1)
        return candidate


@dataclass(frozen=True)
class ServiceSpec:
    """
    A catalog service as seen by the engine.

    Only ``id`` and ``duration_minutes`` take part in scheduling.
    """
    id: int
    duration_minutes: int
    name: str = ""
    price: float = 0.0

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ConfigurationError(
                f"Service {self.id} duration_minutes must be greater than zero, "
                f"got {self.duration_minutes}"
            )


@dataclass(frozen=True)
class ExistingBooking:
    """
    Read-only snapshot of an appointment held by the booking store.

    The duration is the one snapshotted when the booking was made, it is
    never re-read from the catalog.
    """
    start_time: datetime
    end_time: datetime
    status: BookingStatus = BookingStatus.PENDING
    id: Optional[str] = None
    service_id: Optional[int] = None
    client_id: Optional[str] = None
    pet_id: Optional[str] = None

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise InvalidIntervalError(
                f"Booking {self.id or '<new>'} must end after it starts "
                f"({self.start_time} -> {self.end_time})"
            )
        object.__setattr__(self, "status", BookingStatus(self.status))

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.time_range.duration_minutes()

    @property
    def occupies_calendar(self) -> bool:
        return self.status.occupies_calendar


@dataclass(frozen=True)
class CandidateSlot:
    """
    A bookable start time for a service on a given day.
    """
    date: date
    start_time: time
    duration_minutes: int
    timezone: str = "America/Sao_Paulo"
    start: DateTime = field(init=False, repr=False, compare=False)
    end: DateTime = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        start = pendulum.datetime(
            self.date.year,
            self.date.month,
            self.date.day,
            self.start_time.hour,
            self.start_time.minute,
            tz=self.timezone,
        )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", compute_end(start, self.duration_minutes))

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    @property
    def label(self) -> str:
        """Start time as ``HH:MM``, the way slots are offered to customers."""
        return f"{self.start_time:%H:%M}"

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, DD.MM.YYYY | HH:MM - HH:MM (N min)
        """
        weekday = WEEKDAY_NAMES[weekday_number(self.date)]
        return (
            f"{weekday}, {self.date:%d.%m.%Y} | "
            f"{self.start:%H:%M} - {self.end:%H:%M} ({self.duration_minutes} min)"
        )


def slots_for_day(
    day: date,
    start_times: Iterable[time],
    duration_minutes: int,
    timezone: str,
) -> List[CandidateSlot]:
    """Wrap generated start times into CandidateSlot objects."""
    return [
        CandidateSlot(date=day, start_time=start, duration_minutes=duration_minutes, timezone=timezone)
        for start in start_times
    ]
