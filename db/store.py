"""
Booking store contract shared by the timed jobs.

Every transition that must happen at most once goes through
``conditional_update``: the expected fields are re-checked inside the same
atomic write that applies the change, so concurrent ticks and concurrent
worker instances never double-apply a transition.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from models.booking import Booking, BookingStatus
from models.reminder import Contact, ReminderKind
from utils.datetime_utils import parse_iso_datetime, to_iso_string


class _NotNull:
    """Filter value matching any non-null column."""

    def __repr__(self) -> str:
        return "NOT_NULL"


NOT_NULL = _NotNull()

REMINDER_COLUMNS = [kind.flag_column for kind in ReminderKind]

_DATETIME_COLUMNS = ["scheduled_at", "no_show_at", "assigned_at", "created_at", "updated_at"]


class BookingStore(Protocol):
    """Query / update contract for the persistent booking collection."""

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
        Bookings in ``status`` whose ``field`` lies in ``[lower, upper]``.

        ``extra`` maps column to expected value: None matches NULL,
        NOT_NULL matches any non-null value, anything else is equality.
        """
        ...

    async def conditional_update(
        self,
        booking_id: str,
        expected: Mapping[str, Any],
        changes: Mapping[str, Any],
    ) -> Optional[Booking]:
        """Apply ``changes`` only if the record still matches ``expected``.

        Returns the updated booking, or None when nothing matched.
        """
        ...

    async def update(self, booking_id: str, changes: Mapping[str, Any]) -> None:
        ...

    async def get_technician_contact(self, technician_id: str) -> Optional[Contact]:
        ...

    async def get_customer_contact(self, customer_id: str) -> Optional[Contact]:
        ...

    async def record_acceptance(
        self, booking_id: str, technician_id: str, now: datetime
    ) -> Optional[Booking]:
        ...


def acceptance_changes(technician_id: str, now: datetime) -> Dict[str, Any]:
    """
    Changes applied when a technician accepts a requested booking.

    Clears the no-show marker and the reminder flags of any previous
    assignment so the new one gets fresh reminders and no-show detection.
    """
    changes: Dict[str, Any] = {
        "status": BookingStatus.ACCEPTED.value,
        "technician_id": technician_id,
        "assigned_at": now,
        "no_show_at": None,
    }
    changes.update({column: False for column in REMINDER_COLUMNS})
    return changes


ACCEPTANCE_EXPECTED = {
    "status": BookingStatus.REQUESTED.value,
    "technician_id": None,
}


def serialize_value(value: Any) -> Any:
    """Convert a filter / change value to its stored representation."""
    if isinstance(value, datetime):
        return to_iso_string(value)
    if isinstance(value, Enum):
        return value.value
    return value


def parse_booking_row(item: Mapping[str, Any]) -> Booking:
    """
    Parse a flat booking row into a Booking.

    Timestamps may arrive as ISO strings or datetimes; the three
    ``reminders_sent_*`` columns fold into ``Booking.reminders_sent``.
    """
    item = dict(item)
    for field in _DATETIME_COLUMNS:
        if isinstance(item.get(field), str):
            item[field] = parse_iso_datetime(item[field])

    reminders = {}
    for kind in ReminderKind:
        value = item.pop(kind.flag_column, None)
        if value is not None:
            reminders[kind.value] = bool(value)
    if reminders:
        item["reminders_sent"] = reminders

    return Booking(**item)


def booking_to_row(booking: Booking) -> Dict[str, Any]:
    """Flatten a Booking into its stored column layout."""
    row = booking.model_dump(exclude={"reminders_sent"})
    for kind in ReminderKind:
        row[kind.flag_column] = getattr(booking.reminders_sent, kind.value)
    return row
