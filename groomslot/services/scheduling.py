"""
Application services for offering, booking and moving appointments.

The service coordinates the booking store and the catalog via simple
protocols and delegates every decision to the pure domain functions.
Availability checks made here are advisory: the store's insert and move
operations perform the authoritative overlap check and raise
``ConflictError`` when another booking won the race.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Protocol

from ..domain.conflict_checker import find_conflicts
from ..domain.exceptions import (
    ConflictError,
    ReschedulePolicyError,
    SlotUnavailableError,
)
from ..domain.models import (
    BookingStatus,
    BusinessCalendar,
    CandidateSlot,
    ExistingBooking,
    ServiceSpec,
    slots_for_day,
)
from ..domain.policies import DEFAULT_RESCHEDULE_NOTICE, can_reschedule
from ..domain.slot_generator import SlotGenerator

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the booking store behaviour needed by the service."""

    async def fetch_bookings_overlapping(
        self, start: datetime, end: datetime
    ) -> List[ExistingBooking]:
        """Return bookings overlapping ``[start, end)``, cancelled ones included."""

    async def get_booking(self, booking_id: str) -> ExistingBooking:
        """Return one booking or raise BookingNotFoundError."""

    async def insert_booking(self, booking: ExistingBooking) -> ExistingBooking:
        """Persist a booking or raise ConflictError."""

    async def move_booking(
        self, booking_id: str, start: datetime, end: datetime
    ) -> ExistingBooking:
        """Move a booking to a new interval or raise ConflictError."""


class CatalogProtocol(Protocol):
    """Protocol describing the service catalog."""

    async def get_service(self, service_id: int) -> ServiceSpec:
        """Return a service or raise ServiceNotFoundError."""


class SchedulingService:
    """
    Orchestrates the read-then-decide cycle around the booking store.

    Dependency inversion toward protocols makes it easy to plug in the
    in-memory store or stubs in tests.
    """

    def __init__(
        self,
        calendar: BusinessCalendar,
        store: BookingStoreProtocol,
        catalog: CatalogProtocol,
        *,
        reschedule_notice: timedelta = DEFAULT_RESCHEDULE_NOTICE,
    ) -> None:
        self._calendar = calendar
        self._store = store
        self._catalog = catalog
        self._generator = SlotGenerator(calendar)
        self._reschedule_notice = reschedule_notice

    async def offer_slots(
        self,
        day: date,
        service_id: int,
        now: datetime,
        *,
        limit: Optional[int] = None,
    ) -> List[CandidateSlot]:
        """
        Slots for ``service_id`` on ``day`` that are not already taken.

        Args:
            day: Requested calendar day
            service_id: Catalog id of the service
            now: Current moment
            limit: Optional maximum number of slots to return

        Returns:
            Ordered list of CandidateSlot objects
        """
        service = await self._catalog.get_service(service_id)
        slots = await self._free_slots(day, service, now)

        if limit is not None:
            slots = slots[:limit]
        return slots

    async def book(
        self,
        day: date,
        start_time: time,
        service_id: int,
        now: datetime,
        *,
        client_id: Optional[str] = None,
        pet_id: Optional[str] = None,
    ) -> ExistingBooking:
        """
        Book ``service_id`` at ``start_time`` on ``day``.

        Raises:
            SlotUnavailableError: If the start time is not a generated slot
            ConflictError: If the interval is taken, before or at commit time
        """
        service = await self._catalog.get_service(service_id)
        slot = self._require_generated_slot(day, start_time, service, now)

        await self._precheck(slot)

        booking = ExistingBooking(
            start_time=slot.start,
            end_time=slot.end,
            status=BookingStatus.PENDING,
            service_id=service.id,
            client_id=client_id,
            pet_id=pet_id,
        )
        stored = await self._store.insert_booking(booking)
        logger.info("Booked %s for service %s (%s)", slot.format_display(), service.id, stored.id)
        return stored

    async def reschedule(
        self,
        booking_id: str,
        new_day: date,
        new_start_time: time,
        now: datetime,
    ) -> ExistingBooking:
        """
        Move an existing booking to a new slot.

        The booking keeps the duration it was booked with.

        Raises:
            ReschedulePolicyError: If the booking can no longer be moved
            SlotUnavailableError: If the new start time is not a generated slot
            ConflictError: If the new interval is taken
        """
        booking = await self._store.get_booking(booking_id)

        if not can_reschedule(
            booking,
            now,
            minimum_notice=self._reschedule_notice,
            timezone=self._calendar.timezone,
        ):
            raise ReschedulePolicyError(
                f"Booking {booking_id} ({booking.status.value}, starts {booking.start_time}) "
                f"cannot be rescheduled"
            )

        slot = self._require_generated_slot(
            new_day, new_start_time, _snapshotted_service(booking), now
        )
        await self._precheck(slot, exclude_booking_id=booking.id)

        moved = await self._store.move_booking(booking.id, slot.start, slot.end)
        logger.info("Rescheduled booking %s to %s", booking_id, slot.format_display())
        return moved

    async def reschedule_options(
        self, booking_id: str, new_day: date, now: datetime
    ) -> List[CandidateSlot]:
        """Slots a booking could be moved to on ``new_day``, ignoring itself."""
        booking = await self._store.get_booking(booking_id)
        if not can_reschedule(
            booking,
            now,
            minimum_notice=self._reschedule_notice,
            timezone=self._calendar.timezone,
        ):
            return []
        return await self._free_slots(
            new_day, _snapshotted_service(booking), now, exclude_booking_id=booking.id
        )

    async def _free_slots(
        self,
        day: date,
        service: ServiceSpec,
        now: datetime,
        *,
        exclude_booking_id: Optional[str] = None,
    ) -> List[CandidateSlot]:
        start_times = self._generator.generate(day, service, now)
        if not start_times:
            return []

        slots = slots_for_day(
            day, start_times, service.duration_minutes, self._calendar.timezone
        )
        bookings = await self._store.fetch_bookings_overlapping(
            slots[0].start, slots[-1].end
        )

        return [
            slot
            for slot in slots
            if not find_conflicts(
                slot.start, slot.end, bookings, exclude_booking_id=exclude_booking_id
            )
        ]

    def _require_generated_slot(
        self, day: date, start_time: time, service: ServiceSpec, now: datetime
    ) -> CandidateSlot:
        requested = time(hour=start_time.hour, minute=start_time.minute)
        start_times = self._generator.generate(day, service, now)

        if requested not in start_times:
            raise SlotUnavailableError(
                f"{requested:%H:%M} on {day} is not a bookable slot for a "
                f"{service.duration_minutes} min service"
            )

        return CandidateSlot(
            date=day,
            start_time=requested,
            duration_minutes=service.duration_minutes,
            timezone=self._calendar.timezone,
        )

    async def _precheck(
        self, slot: CandidateSlot, *, exclude_booking_id: Optional[str] = None
    ) -> None:
        bookings = await self._store.fetch_bookings_overlapping(slot.start, slot.end)
        conflicts = find_conflicts(
            slot.start, slot.end, bookings, exclude_booking_id=exclude_booking_id
        )
        if conflicts:
            raise ConflictError(
                f"{slot.format_display()} overlaps {len(conflicts)} existing booking(s)",
                conflicts,
            )


def _snapshotted_service(booking: ExistingBooking) -> ServiceSpec:
    # Moves keep the duration the booking was made with, not the catalog's current one
    return ServiceSpec(id=booking.service_id, duration_minutes=booking.duration_minutes)
