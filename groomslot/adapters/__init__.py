"""
Adapters layer - Booking store and catalog implementations.
"""

from .catalog import ConfigCatalog
from .memory_store import InMemoryBookingStore

__all__ = ["ConfigCatalog", "InMemoryBookingStore"]
