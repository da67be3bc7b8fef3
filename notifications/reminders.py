"""
Reminder composer.
Turns a booking and a reminder stage into a technician-facing message and
delivers it over push, socket and SMS. Also notifies customers when their
booking goes back out for a new technician.

Nothing here raises to the timed jobs; failures come back as a
DeliveryResult or are logged and dropped.
"""

from datetime import datetime
from typing import Optional

from config import settings
from db import BookingStore, get_booking_store
from models.booking import Booking
from models.reminder import DeliveryResult, ReminderKind, ReminderMessage
from utils.datetime_utils import to_iso_string, to_local, utc_now
from utils.logging_config import setup_logging

from .gateway import NotificationGateway, get_notification_gateway
from .realtime import customer_room, technician_room

logger = setup_logging(
    name=__name__,
    log_level=settings.log_level,
    log_file="notifications.log",
    log_dir="logs",
)

REMINDER_TEMPLATES = {
    ReminderKind.H24: (
        "⏰ Reminder: Job Tomorrow",
        "Hi {name}, you have a scheduled job tomorrow at {time}. Please be prepared!",
    ),
    ReminderKind.H1: (
        "🔔 Job in 1 Hour",
        "Hi {name}, your job starts in 1 hour at {time}. Head out soon!",
    ),
    ReminderKind.MIN15: (
        "🚀 Job Starts in 15 Minutes!",
        "Hi {name}, your job starts in 15 minutes. Navigate to customer location now.",
    ),
}

DEFAULT_TECHNICIAN_NAME = "Technician"
NAVIGATION_MESSAGE = "Navigate to customer location now"
REBROADCAST_MESSAGE = (
    "Your previous technician couldn't make it on time. "
    "We're finding you a new technician right away!"
)


def format_scheduled_time(scheduled_at: Optional[datetime]) -> str:
    """Human-readable start time in the display timezone, e.g. ``05 Mar 2026, 02:30 PM``."""
    if scheduled_at is None:
        return "your scheduled time"
    return to_local(scheduled_at, settings.display_timezone).strftime("%d %b %Y, %I:%M %p")


def compose_reminder(
    kind: ReminderKind, technician_name: str, scheduled_at: Optional[datetime]
) -> ReminderMessage:
    """Build the title and body for a reminder stage."""
    title, body = REMINDER_TEMPLATES[kind]
    return ReminderMessage(
        title=title,
        body=body.format(name=technician_name, time=format_scheduled_time(scheduled_at)),
    )


async def send_scheduled_reminder(
    booking: Booking,
    kind: ReminderKind,
    store: Optional[BookingStore] = None,
    gateway: Optional[NotificationGateway] = None,
) -> DeliveryResult:
    """
    Send a reminder to the technician assigned to a booking.

    Push is always attempted, the socket event only when a live channel
    exists, SMS only for the 1h and 15min stages. SMS failure never affects
    the result.

    Args:
        booking: Booking with technician_id and scheduled_at loaded
        kind: Reminder stage
        store: Booking store used for the technician lookup
        gateway: Notification gateway

    Returns:
        DeliveryResult, success reflects the push delivery
    """
    technician_id = booking.technician_id
    if not technician_id:
        return DeliveryResult(success=False, reason="No technician assigned")

    tag = kind.value.upper()
    try:
        store = store or get_booking_store()
        gateway = gateway or get_notification_gateway()

        contact = await store.get_technician_contact(technician_id)
        name = (contact.name if contact else None) or DEFAULT_TECHNICIAN_NAME
        phone = contact.phone if contact else None

        message = compose_reminder(kind, name, booking.scheduled_at)

        pushed = await gateway.send_push(
            technician_id,
            message.title,
            message.body,
            data={"type": f"reminder_{kind.value}", "bookingId": booking.id},
        )

        if gateway.has_socket:
            await gateway.send_socket_event(
                technician_room(technician_id),
                "booking:reminder",
                {
                    "type": kind.value,
                    "bookingId": booking.id,
                    "scheduledAt": to_iso_string(booking.scheduled_at)
                    if booking.scheduled_at
                    else None,
                    "message": message.body,
                },
            )

        if phone and kind.sends_sms:
            try:
                await gateway.send_sms(phone, message.body)
            except Exception as e:
                logger.warning(f"[REMINDER:{tag}] SMS failed for technician {technician_id}: {e}")

        if not pushed:
            return DeliveryResult(success=False, reason="Push delivery failed")

        logger.info(
            f"[REMINDER:{tag}] Sent to technician {technician_id} for booking {booking.id}"
        )
        return DeliveryResult(success=True)

    except Exception as e:
        logger.error(
            f"[REMINDER:{tag}] Error for booking {booking.id}: {e}", exc_info=True
        )
        return DeliveryResult(success=False, reason=str(e))


async def send_navigation_prompt(
    booking: Booking, gateway: Optional[NotificationGateway] = None
) -> bool:
    """
    Push the service location to the technician's live channel.

    Returns:
        True if an event was emitted, False when there is no technician,
        no coordinates or no live channel
    """
    gateway = gateway or get_notification_gateway()
    coordinates = booking.navigation_coordinates()

    if not booking.technician_id or coordinates is None or not gateway.has_socket:
        return False

    latitude, longitude = coordinates
    await gateway.send_socket_event(
        technician_room(booking.technician_id),
        "booking:navigate",
        {
            "bookingId": booking.id,
            "latitude": latitude,
            "longitude": longitude,
            "message": NAVIGATION_MESSAGE,
        },
    )
    return True


async def notify_customer_of_rebroadcast(
    booking: Booking,
    store: Optional[BookingStore] = None,
    gateway: Optional[NotificationGateway] = None,
    now: Optional[datetime] = None,
) -> None:
    """Tell the customer their booking is being offered to a new technician."""
    customer_id = booking.customer_id
    if not customer_id:
        return

    try:
        store = store or get_booking_store()
        gateway = gateway or get_notification_gateway()

        await gateway.send_socket_event(
            customer_room(customer_id),
            "booking:rebroadcast",
            {
                "bookingId": booking.id,
                "message": REBROADCAST_MESSAGE,
                "timestamp": to_iso_string(now or utc_now()),
            },
        )

        try:
            contact = await store.get_customer_contact(customer_id)
            if contact and contact.phone:
                await gateway.send_sms(
                    contact.phone, f"{settings.sms_brand_name}: {REBROADCAST_MESSAGE}"
                )
        except Exception as e:
            logger.warning(f"Customer SMS failed for booking {booking.id}: {e}")

        logger.info(f"Customer {customer_id} notified of re-broadcast for booking {booking.id}")
    except Exception as e:
        logger.error(
            f"Rebroadcast notification error for booking {booking.id}: {e}", exc_info=True
        )
