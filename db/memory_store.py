"""
In-memory booking store.

Used for local runs (``BOOKING_STORE_BACKEND=memory``) and tests. A single
asyncio lock makes every conditional update an atomic compare-and-set, which
gives the same at-most-once guarantees as the Supabase store within one
process.
"""

import asyncio
import copy
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from models.booking import Booking, BookingStatus
from models.reminder import Contact
from utils.datetime_utils import utc_now
from utils.exceptions import BookingNotFoundError

from .store import (
    ACCEPTANCE_EXPECTED,
    NOT_NULL,
    acceptance_changes,
    booking_to_row,
    parse_booking_row,
    serialize_value,
)


def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    for column, value in filters.items():
        current = row.get(column)
        if value is None:
            if current is not None:
                return False
        elif value is NOT_NULL:
            if current is None:
                return False
        elif current != serialize_value(value) and current != value:
            return False
    return True


class InMemoryBookingStore:
    """Dict-backed implementation of the booking store contract."""

    def __init__(self, bookings: Optional[Iterable[Booking]] = None):
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._contacts: Dict[str, Contact] = {}
        self._lock = asyncio.Lock()
        for booking in bookings or []:
            self.add(booking)

    def add(self, booking: Booking) -> None:
        """Insert or replace a booking."""
        self._rows[booking.id] = booking_to_row(booking)

    def add_contact(self, contact: Contact) -> None:
        """Register a technician or customer identity record."""
        self._contacts[contact.id] = contact

    def get(self, booking_id: str) -> Booking:
        if booking_id not in self._rows:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return parse_booking_row(self._rows[booking_id])

    async def find_by_status_and_window(
        self,
        status: BookingStatus,
        field: str = "scheduled_at",
        lower: Optional[datetime] = None,
        upper: Optional[datetime] = None,
        extra: Optional[Mapping[str, Any]] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> List[Booking]:
        async with self._lock:
            rows = [copy.deepcopy(row) for row in self._rows.values()]

        selected = []
        for row in rows:
            if row.get("status") != serialize_value(status):
                continue
            value = row.get(field)
            if (lower is not None or upper is not None) and value is None:
                continue
            if lower is not None and value < lower:
                continue
            if upper is not None and value > upper:
                continue
            if not _matches(row, extra or {}):
                continue
            selected.append(row)

        selected.sort(key=lambda row: (row.get(field) is None, row.get(field) or 0))
        return [parse_booking_row(row) for row in selected]

    async def conditional_update(
        self,
        booking_id: str,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> Optional[Booking]:
        async with self._lock:
            row = self._rows.get(booking_id)
            if row is None or not _matches(row, expected):
                return None
            self._apply(row, changes)
            return parse_booking_row(row)

    async def update(self, booking_id: str, changes: Mapping[str, Any]) -> None:
        async with self._lock:
            row = self._rows.get(booking_id)
            if row is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")
            self._apply(row, changes)

    async def record_acceptance(
        self, booking_id: str, technician_id: str, now: datetime
    ) -> Optional[Booking]:
        return await self.conditional_update(
            booking_id, ACCEPTANCE_EXPECTED, acceptance_changes(technician_id, now)
        )

    async def get_technician_contact(self, technician_id: str) -> Optional[Contact]:
        return self._contacts.get(technician_id)

    async def get_customer_contact(self, customer_id: str) -> Optional[Contact]:
        return self._contacts.get(customer_id)

    @staticmethod
    def _apply(row: Dict[str, Any], changes: Mapping[str, Any]) -> None:
        for column, value in changes.items():
            # Datetimes stay native so window comparisons keep working
            row[column] = value if isinstance(value, datetime) else serialize_value(value)
        row["updated_at"] = utc_now()
