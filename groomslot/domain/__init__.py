"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .conflict_checker import find_conflicts, is_available
from .exceptions import (
    BookingNotFoundError,
    ConfigurationError,
    ConflictError,
    GroomslotError,
    InvalidIntervalError,
    ReschedulePolicyError,
    ServiceNotFoundError,
    SlotUnavailableError,
)
from .models import (
    BookingStatus,
    BusinessCalendar,
    CandidateSlot,
    ExistingBooking,
    ServiceSpec,
    TimeRange,
)
from .policies import can_reschedule
from .slot_generator import EmptyReason, SlotGenerator, explain_empty, generate_slots
from .timekeeping import compute_end

__all__ = [
    "BookingNotFoundError",
    "BookingStatus",
    "BusinessCalendar",
    "CandidateSlot",
    "ConfigurationError",
    "ConflictError",
    "EmptyReason",
    "ExistingBooking",
    "GroomslotError",
    "InvalidIntervalError",
    "ReschedulePolicyError",
    "ServiceNotFoundError",
    "ServiceSpec",
    "SlotGenerator",
    "SlotUnavailableError",
    "TimeRange",
    "can_reschedule",
    "compute_end",
    "explain_empty",
    "find_conflicts",
    "generate_slots",
    "is_available",
]
