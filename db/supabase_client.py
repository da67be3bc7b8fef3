"""
Supabase booking store.
Handles all booking reads and writes performed by the timed jobs.

Conditional updates are sent as a single PostgREST ``PATCH`` whose filters
carry the expected state, i.e. ``UPDATE ... WHERE id = ? AND status = ?``.
Postgres applies it atomically per row, so the returned rows tell us whether
this worker won the transition. An empty result is a no-match, not an error.

supabase-py's ``Client`` is synchronous; every ``execute()`` runs in a worker
thread so a slow round-trip never stalls the event loop shared by the jobs.

This client uses the service key which bypasses RLS.
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError
from supabase import Client as SupabaseClientType
from supabase import create_client

from config import settings
from models.booking import Booking, BookingStatus
from models.reminder import Contact
from utils.datetime_utils import to_iso_string, utc_now
from utils.exceptions import BookingNotFoundError, DatabaseError
from utils.logging_config import setup_logging

from .store import (
    ACCEPTANCE_EXPECTED,
    NOT_NULL,
    acceptance_changes,
    parse_booking_row,
    serialize_value,
)

logger = setup_logging(
    name=__name__, log_level=settings.log_level, log_file="db.log", log_dir="logs"
)


class SupabaseBookingStore:
    """Supabase-backed implementation of the booking store contract."""

    def __init__(self):
        self.client: SupabaseClientType = create_client(
            settings.supabase_url, settings.supabase_key
        )
        self.table = settings.bookings_table

    # ========== Query Helpers ==========

    def _apply_filters(self, query, filters: Mapping[str, Any]):
        """Translate expected-field mappings into PostgREST filters."""
        for column, value in filters.items():
            if value is None:
                query = query.is_(column, "null")
            elif value is NOT_NULL:
                query = query.not_.is_(column, "null")
            else:
                query = query.eq(column, serialize_value(value))
        return query

    def _serialize_changes(self, changes: Mapping[str, Any]) -> Dict[str, Any]:
        data = {column: serialize_value(value) for column, value in changes.items()}
        data["updated_at"] = to_iso_string(utc_now())
        return data

    async def _execute(self, query):
        # Run synchronous PostgREST call in a thread to avoid blocking
        return await asyncio.to_thread(query.execute)

    # ========== Booking Operations ==========

    async def find_by_status_and_window(
        self,
        status: BookingStatus,
        field: str = "scheduled_at",
        lower: Optional[datetime] = None,
        upper: Optional[datetime] = None,
        extra: Optional[Mapping[str, Any]] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> List[Booking]:
        """
        Get bookings in a status whose ``field`` falls inside the window.

        Rows that fail validation are logged and skipped so one bad record
        never hides the rest of the window.
        """
        try:
            query = (
                self.client.table(self.table)
                .select(",".join(columns) if columns else "*")
                .eq("status", serialize_value(status))
            )

            if lower is not None:
                query = query.gte(field, to_iso_string(lower))
            if upper is not None:
                query = query.lte(field, to_iso_string(upper))

            query = self._apply_filters(query, extra or {})
            response = await self._execute(query.order(field, desc=False))
        except Exception as e:
            raise DatabaseError(f"Failed to find bookings: {e}") from e

        bookings = []
        for item in response.data:
            try:
                bookings.append(parse_booking_row(item))
            except (ValidationError, ValueError) as e:
                logger.error(f"Skipping malformed booking {item.get('id')}: {e}")
        return bookings

    async def conditional_update(
        self,
        booking_id: str,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> Optional[Booking]:
        """Compare-and-set update. Returns None when the guard did not match."""
        try:
            query = (
                self.client.table(self.table)
                .update(self._serialize_changes(changes))
                .eq("id", booking_id)
            )
            response = await self._execute(self._apply_filters(query, expected))

            if not response.data:
                return None

            return parse_booking_row(response.data[0])
        except Exception as e:
            raise DatabaseError(f"Failed to update booking {booking_id}: {e}") from e

    async def update(self, booking_id: str, changes: Mapping[str, Any]) -> None:
        """Unconditional update of a booking."""
        try:
            response = await self._execute(
                self.client.table(self.table)
                .update(self._serialize_changes(changes))
                .eq("id", booking_id)
            )
        except Exception as e:
            raise DatabaseError(f"Failed to update booking {booking_id}: {e}") from e

        if not response.data:
            raise BookingNotFoundError(f"Booking {booking_id} not found")

    async def record_acceptance(
        self, booking_id: str, technician_id: str, now: datetime
    ) -> Optional[Booking]:
        """
        Assign a technician to a requested booking.

        Called by the acceptance flow. Clears ``no_show_at`` and the reminder
        flags so the new assignment is watched from scratch.
        """
        return await self.conditional_update(
            booking_id, ACCEPTANCE_EXPECTED, acceptance_changes(technician_id, now)
        )

    # ========== Identity Lookups ==========

    async def get_technician_contact(self, technician_id: str) -> Optional[Contact]:
        """Resolve a technician profile to the linked user's name and phone."""
        try:
            response = await self._execute(
                self.client.table(settings.technician_profiles_table)
                .select(f"id, user:{settings.users_table}(first_name, mobile_number)")
                .eq("id", technician_id)
            )

            if not response.data:
                return None

            user = response.data[0].get("user") or {}
            return Contact(
                id=technician_id,
                name=user.get("first_name"),
                phone=user.get("mobile_number"),
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get technician {technician_id}: {e}") from e

    async def get_customer_contact(self, customer_id: str) -> Optional[Contact]:
        """Get a customer's name and phone."""
        try:
            response = await self._execute(
                self.client.table(settings.users_table)
                .select("id, first_name, mobile_number")
                .eq("id", customer_id)
            )

            if not response.data:
                return None

            item = response.data[0]
            return Contact(
                id=customer_id,
                name=item.get("first_name"),
                phone=item.get("mobile_number"),
            )
        except Exception as e:
            raise DatabaseError(f"Failed to get customer {customer_id}: {e}") from e
