"""Booking store client and operations."""

from typing import Optional

from config import settings

from .memory_store import InMemoryBookingStore
from .store import NOT_NULL, REMINDER_COLUMNS, BookingStore
from .supabase_client import SupabaseBookingStore

# Global store instance
_store: Optional[BookingStore] = None


def get_booking_store() -> BookingStore:
    """Get or create the configured booking store."""
    global _store
    if _store is None:
        if settings.booking_store_backend == "memory":
            _store = InMemoryBookingStore()
        else:
            _store = SupabaseBookingStore()
    return _store


__all__ = [
    "NOT_NULL",
    "REMINDER_COLUMNS",
    "BookingStore",
    "InMemoryBookingStore",
    "SupabaseBookingStore",
    "get_booking_store",
]
