"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .scheduling import BookingStoreProtocol, CatalogProtocol, SchedulingService

__all__ = ["BookingStoreProtocol", "CatalogProtocol", "SchedulingService"]
