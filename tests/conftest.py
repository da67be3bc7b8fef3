"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from db import InMemoryBookingStore
from matching import MatchResult
from models.booking import AddressSnapshot, Booking, BookingStatus
from models.reminder import Contact
from notifications.gateway import NotificationGateway

FIXED_NOW = datetime(2026, 3, 5, 8, 0, tzinfo=timezone.utc)
_UNSET = object()


@pytest.fixture
def now():
    """Fixed reference time for window calculations."""
    return FIXED_NOW


@pytest.fixture
def make_booking(now):
    """Factory for bookings relative to ``now``."""

    def _make(
        booking_id="booking_1",
        status=BookingStatus.ACCEPTED,
        starts_in=timedelta(hours=24),
        technician_id=_UNSET,
        customer_id="cust_1",
        **kwargs,
    ):
        if technician_id is _UNSET:
            technician_id = "tech_1" if status == BookingStatus.ACCEPTED else None
        kwargs.setdefault("assigned_at", now - timedelta(days=1) if technician_id else None)
        return Booking(
            id=booking_id,
            status=status,
            scheduled_at=now + starts_in,
            technician_id=technician_id,
            customer_id=customer_id,
            **kwargs,
        )

    return _make


@pytest.fixture
def store():
    """In-memory booking store with technician and customer identities."""
    store = InMemoryBookingStore()
    store.add_contact(Contact(id="tech_1", name="Ravi", phone="+919876543210"))
    store.add_contact(Contact(id="tech_2", name="Asha", phone="+919812345678"))
    store.add_contact(Contact(id="cust_1", name="Meera", phone="9123456780"))
    return store


@pytest.fixture
def matching():
    """Matching client that reports three technicians notified."""
    client = MagicMock()
    client.broadcast = AsyncMock(return_value=MatchResult(count=3))
    return client


@pytest.fixture
def gateway():
    """Notification gateway with a live socket channel."""
    gw = MagicMock(spec=NotificationGateway)
    gw.has_socket = True
    gw.send_push = AsyncMock(return_value=True)
    gw.send_socket_event = AsyncMock(return_value=None)
    gw.send_sms = AsyncMock(return_value=True)
    return gw


@pytest.fixture
def wired(store, matching, gateway):
    """Point every timed job at the in-memory store and mocked collaborators."""
    with patch("scheduler.activation.get_booking_store", return_value=store), patch(
        "scheduler.reminders.get_booking_store", return_value=store
    ), patch("scheduler.no_show.get_booking_store", return_value=store), patch(
        "scheduler.activation.get_matching_client", return_value=matching
    ), patch(
        "scheduler.no_show.get_matching_client", return_value=matching
    ), patch(
        "notifications.reminders.get_booking_store", return_value=store
    ), patch(
        "notifications.reminders.get_notification_gateway", return_value=gateway
    ):
        yield SimpleNamespace(store=store, matching=matching, gateway=gateway)


@pytest.fixture
def address():
    return AddressSnapshot(line1="12 MG Road", city="Pune", latitude=18.52, longitude=73.85)
