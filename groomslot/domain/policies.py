"""
Rules gating changes to existing bookings.
"""

from datetime import datetime, timedelta

from .models import BookingStatus, ExistingBooking
from .timekeeping import localize

DEFAULT_RESCHEDULE_NOTICE = timedelta(hours=24)

# Bookings in these states can no longer be moved
FINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def can_reschedule(
    booking: ExistingBooking,
    now: datetime,
    *,
    minimum_notice: timedelta = DEFAULT_RESCHEDULE_NOTICE,
    timezone: str = "America/Sao_Paulo",
) -> bool:
    """
    Check whether ``booking`` may still be moved at ``now``.

    Cancelled and completed bookings cannot be moved, and neither can
    bookings starting less than ``minimum_notice`` from now. Exactly
    ``minimum_notice`` ahead is still allowed. Naive timestamps are read
    as wall-clock time in ``timezone``.
    """
    if booking.status in FINAL_STATUSES:
        return False
    return localize(booking.start_time, timezone) - localize(now, timezone) >= minimum_notice
