"""
Basic unit tests for booking models.
"""

from datetime import timedelta

from models.booking import AddressSnapshot, Booking, BookingStatus, GeoPoint
from models.reminder import ReminderKind


def test_booking_status_enum():
    """Test booking status enum."""
    assert BookingStatus.SCHEDULED.value == "scheduled"
    assert BookingStatus.REQUESTED.value == "requested"
    assert BookingStatus.ACCEPTED.value == "accepted"
    assert len(BookingStatus) == 7


def test_booking_defaults():
    """Test a new booking starts scheduled with no reminders sent."""
    booking = Booking(id="b1")
    assert booking.status == "scheduled"
    assert booking.reminders_sent.h24 is False
    assert booking.reminders_sent.h1 is False
    assert booking.reminders_sent.min15 is False


def test_reminder_kind_properties():
    """Test reminder stage flags, windows and tags."""
    assert ReminderKind.H24.flag_column == "reminders_sent_h24"
    assert ReminderKind.MIN15.flag_column == "reminders_sent_min15"

    assert ReminderKind.H24.window == (timedelta(hours=23), timedelta(hours=25))
    assert ReminderKind.H1.window == (timedelta(minutes=55), timedelta(minutes=65))
    assert ReminderKind.MIN15.window == (timedelta(minutes=10), timedelta(minutes=20))

    assert [kind.job_tag for kind in ReminderKind] == ["24H", "1H", "15MIN"]
    assert [kind.sends_sms for kind in ReminderKind] == [False, True, True]


def test_navigation_prefers_address_snapshot():
    booking = Booking(
        id="b1",
        address_snapshot=AddressSnapshot(latitude=18.52, longitude=73.85),
        location=GeoPoint(coordinates=[77.59, 12.97]),
    )
    assert booking.navigation_coordinates() == (18.52, 73.85)


def test_navigation_falls_back_to_geo_point():
    booking = Booking(id="b1", location=GeoPoint(coordinates=[77.59, 12.97]))
    assert booking.navigation_coordinates() == (12.97, 77.59)


def test_navigation_missing():
    assert Booking(id="b1").navigation_coordinates() is None
    assert Booking(id="b1", location=GeoPoint()).navigation_coordinates() is None
