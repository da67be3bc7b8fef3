"""Pydantic models for data validation and serialization."""

from .booking import AddressSnapshot, Booking, BookingStatus, GeoPoint, RemindersSent
from .reminder import Contact, DeliveryResult, ReminderKind, ReminderMessage

__all__ = [
    "AddressSnapshot",
    "Booking",
    "BookingStatus",
    "Contact",
    "DeliveryResult",
    "GeoPoint",
    "ReminderKind",
    "ReminderMessage",
    "RemindersSent",
]
