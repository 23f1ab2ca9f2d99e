"""
Domain-specific exception hierarchy for the scheduling engine.
"""


class GroomslotError(Exception):
    """Base class for all application-level errors."""


class InvalidIntervalError(GroomslotError, ValueError):
    """Raised when an interval does not end strictly after it starts."""


class ConfigurationError(GroomslotError, ValueError):
    """Raised for invalid calendar rules or service definitions."""


class ConflictError(GroomslotError):
    """
    Raised when a booking overlaps an existing one at commit time.

    Callers should treat this as "the slot just became unavailable",
    regenerate the slot list and ask the customer to pick again.
    """

    def __init__(self, message: str, conflicts=()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class SlotUnavailableError(GroomslotError):
    """Raised when a requested start time is not a bookable slot."""


class ReschedulePolicyError(GroomslotError):
    """Raised when a booking may not be moved anymore."""


class ServiceNotFoundError(GroomslotError, LookupError):
    """Raised when the catalog has no service with the given id."""


class BookingNotFoundError(GroomslotError, LookupError):
    """Raised when the booking store has no booking with the given id."""
