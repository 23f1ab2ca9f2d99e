"""
In-memory booking store, optionally seeded from and saved to a JSON file.
"""

import asyncio
import dataclasses
import json
import logging
from datetime import datetime
from itertools import count
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pendulum

from ..domain.conflict_checker import find_conflicts
from ..domain.exceptions import BookingNotFoundError, ConflictError
from ..domain.models import BookingStatus, ExistingBooking

logger = logging.getLogger(__name__)


class InMemoryBookingStore:
    """
    Booking store holding appointments in a dict.

    Inserts and moves run a final overlap check inside a single lock, which
    serialises every write to the grooming calendar. That check is the one
    that counts; the service layer's pre-check only saves a round trip.
    """

    def __init__(self, bookings: Iterable[ExistingBooking] = ()):
        self._bookings: Dict[str, ExistingBooking] = {}
        self._ids = count(1)
        self._lock = asyncio.Lock()

        for booking in bookings:
            self._seed(booking)

    def _seed(self, booking: ExistingBooking) -> None:
        if booking.id in self._bookings:
            logger.warning("Duplicate booking id %s, keeping the first one", booking.id)
            return

        stored = booking if booking.id else dataclasses.replace(booking, id=self._next_id())

        conflicts = find_conflicts(stored.start_time, stored.end_time, self._bookings.values())
        if stored.occupies_calendar and conflicts:
            logger.warning(
                "Seeded booking %s overlaps booking(s) %s",
                stored.id,
                ", ".join(str(c.id) for c in conflicts),
            )

        self._bookings[stored.id] = stored

    @classmethod
    def load_from_json(cls, path: Path, timezone: str) -> "InMemoryBookingStore":
        """
        Seed a store from a JSON list of bookings.

        Each entry needs ``start`` and ``end`` timestamps and may carry
        ``id``, ``status``, ``service_id``, ``client_id`` and ``pet_id``.
        Timestamps without an offset are read in ``timezone``.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a JSON list
        """
        if not path.exists():
            raise FileNotFoundError(f"Bookings file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

        if not isinstance(entries, list):
            raise ValueError("Bookings file must contain a list at the root level.")

        bookings: List[ExistingBooking] = []
        for position, entry in enumerate(entries):
            try:
                bookings.append(_booking_from_dict(entry, timezone))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping booking #%d in %s: %s", position, path, exc)

        return cls(bookings)

    def dump_to_json(self, path: Path) -> None:
        """Write all bookings to ``path`` in the format read by ``load_from_json``."""
        entries = [_booking_to_dict(b) for b in self.all_bookings()]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2, ensure_ascii=False)

    def all_bookings(self) -> List[ExistingBooking]:
        return sorted(self._bookings.values(), key=lambda b: b.start_time)

    async def fetch_bookings_overlapping(
        self, start: datetime, end: datetime
    ) -> List[ExistingBooking]:
        """Return every booking overlapping ``[start, end)``, cancelled ones included."""
        return [
            booking
            for booking in self.all_bookings()
            if booking.start_time < end and booking.end_time > start
        ]

    async def get_booking(self, booking_id: str) -> ExistingBooking:
        try:
            return self._bookings[booking_id]
        except KeyError:
            raise BookingNotFoundError(f"No booking with id '{booking_id}'") from None

    async def insert_booking(self, booking: ExistingBooking) -> ExistingBooking:
        """
        Store ``booking`` unless it overlaps an active booking.

        Raises:
            ConflictError: If the interval is already taken
        """
        async with self._lock:
            self._raise_on_conflict(booking)
            stored = dataclasses.replace(booking, id=booking.id or self._next_id())
            self._bookings[stored.id] = stored

        logger.debug("Inserted booking %s", stored.id)
        return stored

    async def move_booking(
        self, booking_id: str, start: datetime, end: datetime
    ) -> ExistingBooking:
        """
        Move a booking to ``[start, end)``.

        Raises:
            BookingNotFoundError: If the booking does not exist
            ConflictError: If the new interval is already taken
        """
        async with self._lock:
            current = await self.get_booking(booking_id)
            moved = dataclasses.replace(current, start_time=start, end_time=end)
            self._raise_on_conflict(moved, exclude_booking_id=booking_id)
            self._bookings[booking_id] = moved

        logger.debug("Moved booking %s", booking_id)
        return moved

    async def set_status(self, booking_id: str, status: BookingStatus) -> ExistingBooking:
        async with self._lock:
            current = await self.get_booking(booking_id)
            updated = dataclasses.replace(current, status=status)
            self._bookings[booking_id] = updated
        return updated

    def _raise_on_conflict(
        self, booking: ExistingBooking, exclude_booking_id: Optional[str] = None
    ) -> None:
        conflicts = find_conflicts(
            booking.start_time,
            booking.end_time,
            self._bookings.values(),
            exclude_booking_id=exclude_booking_id,
        )
        if conflicts:
            ids = ", ".join(str(c.id) for c in conflicts)
            logger.info(
                "Rejected %s - %s, overlaps booking(s) %s",
                booking.start_time,
                booking.end_time,
                ids,
            )
            raise ConflictError(
                f"{booking.start_time} - {booking.end_time} overlaps booking(s) {ids}",
                conflicts,
            )

    def _next_id(self) -> str:
        # Skip ids already used by seeded bookings
        while True:
            candidate = str(next(self._ids))
            if candidate not in self._bookings:
                return candidate


def _booking_from_dict(entry: dict, timezone: str) -> ExistingBooking:
    if not isinstance(entry, dict):
        raise TypeError(f"expected an object, got {type(entry).__name__}")
    return ExistingBooking(
        id=str(entry["id"]) if entry.get("id") is not None else None,
        start_time=pendulum.parse(entry["start"], tz=timezone),
        end_time=pendulum.parse(entry["end"], tz=timezone),
        status=BookingStatus(entry.get("status", BookingStatus.PENDING.value)),
        service_id=entry.get("service_id"),
        client_id=entry.get("client_id"),
        pet_id=entry.get("pet_id"),
    )


def _booking_to_dict(booking: ExistingBooking) -> dict:
    return {
        "id": booking.id,
        "start": booking.start_time.isoformat(),
        "end": booking.end_time.isoformat(),
        "status": booking.status.value,
        "service_id": booking.service_id,
        "client_id": booking.client_id,
        "pet_id": booking.pet_id,
    }
