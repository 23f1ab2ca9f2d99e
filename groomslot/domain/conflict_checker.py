"""
Overlap checks between a candidate interval and existing bookings.

Pure predicates: nothing is reserved or locked here. The booking store
performs the authoritative check when a booking is committed.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from .exceptions import InvalidIntervalError
from .models import ExistingBooking, TimeRange

logger = logging.getLogger(__name__)


def find_conflicts(
    candidate_start: datetime,
    candidate_end: datetime,
    existing_bookings: Iterable[ExistingBooking],
    *,
    exclude_booking_id: Optional[str] = None,
) -> List[ExistingBooking]:
    """
    Return the bookings that overlap ``[candidate_start, candidate_end)``.

    Cancelled bookings and the booking identified by ``exclude_booking_id``
    (the one being moved) never conflict. Touching intervals do not overlap.

    Raises:
        InvalidIntervalError: If the candidate does not end after it starts
    """
    if candidate_end <= candidate_start:
        raise InvalidIntervalError(
            f"Candidate end {candidate_end} must be after start {candidate_start}"
        )

    candidate = TimeRange(start=candidate_start, end=candidate_end)

    conflicts = [
        booking
        for booking in existing_bookings
        if booking.occupies_calendar
        and (exclude_booking_id is None or booking.id != exclude_booking_id)
        and candidate.overlaps(booking.time_range)
    ]
    return sorted(conflicts, key=lambda b: b.start_time)


def is_available(
    candidate_start: datetime,
    candidate_end: datetime,
    existing_bookings: Iterable[ExistingBooking],
    *,
    exclude_booking_id: Optional[str] = None,
) -> bool:
    """
    Check whether ``[candidate_start, candidate_end)`` is free.

    Args:
        candidate_start: Start of the interval to book
        candidate_end: End of the interval to book
        existing_bookings: Bookings covering at least the candidate window
        exclude_booking_id: Booking to ignore, e.g. when rescheduling it

    Returns:
        True if no non-cancelled booking overlaps the interval
    """
    conflicts = find_conflicts(
        candidate_start,
        candidate_end,
        existing_bookings,
        exclude_booking_id=exclude_booking_id,
    )
    if conflicts:
        logger.debug(
            "%s - %s conflicts with %d booking(s)",
            candidate_start,
            candidate_end,
            len(conflicts),
        )
    return not conflicts
