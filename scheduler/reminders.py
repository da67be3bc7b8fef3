"""
Technician reminder jobs (24 hours, 1 hour and 15 minutes before start).

Each stage selects accepted bookings whose start falls inside its window and
whose flag is still unset. The window is wider than the job's interval so a
late tick never misses a booking; the flag keeps overlapping windows from
sending the same stage twice.
"""

from datetime import datetime
from typing import Optional

from config import settings
from db import get_booking_store
from models.booking import BookingStatus
from models.reminder import ReminderKind
from notifications import send_navigation_prompt, send_scheduled_reminder
from utils.datetime_utils import utc_now
from utils.logging_config import get_job_logger, setup_logging

_logger = setup_logging(
    name=__name__, log_level=settings.log_level, log_file="scheduler.log", log_dir="logs"
)

_COLUMNS = {
    ReminderKind.H24: ["id", "status", "technician_id", "scheduled_at"],
    ReminderKind.H1: ["id", "status", "technician_id", "scheduled_at"],
    ReminderKind.MIN15: [
        "id",
        "status",
        "technician_id",
        "scheduled_at",
        "address_snapshot",
        "location",
    ],
}


async def send_reminders(kind: ReminderKind, now: Optional[datetime] = None) -> int:
    """
    Send one reminder stage to every eligible technician.

    The flag is set after the delivery attempt whatever its outcome, so a
    stage is attempted at most once per assignment.

    Args:
        kind: Reminder stage
        now: Reference time (defaults to current UTC time)

    Returns:
        Number of bookings whose flag was set by this tick
    """
    logger = get_job_logger(_logger, kind.job_tag)
    now = now or utc_now()
    lower, upper = kind.window

    try:
        store = get_booking_store()
        bookings = await store.find_by_status_and_window(
            BookingStatus.ACCEPTED,
            lower=now + lower,
            upper=now + upper,
            extra={kind.flag_column: False},
            columns=_COLUMNS[kind],
        )
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 0

    if not bookings:
        logger.debug("No reminders due")
        return 0

    logger.info(f"Sending {kind.value} reminders to {len(bookings)} technician(s)")

    reminded = 0
    for booking in bookings:
        try:
            result = await send_scheduled_reminder(booking, kind, store=store)
            if not result.success:
                logger.warning(f"Booking {booking.id}: reminder not delivered ({result.reason})")

            if kind is ReminderKind.MIN15:
                await send_navigation_prompt(booking)

            await store.update(booking.id, {kind.flag_column: True})
            reminded += 1
        except Exception as e:
            logger.error(f"Booking {booking.id}: {e}", exc_info=True)

    return reminded


async def send_reminders_24h(now: Optional[datetime] = None) -> int:
    return await send_reminders(ReminderKind.H24, now)


async def send_reminders_1h(now: Optional[datetime] = None) -> int:
    return await send_reminders(ReminderKind.H1, now)


async def send_reminders_15min(now: Optional[datetime] = None) -> int:
    """15-minute stage, also pushes navigation coordinates to the technician."""
    return await send_reminders(ReminderKind.MIN15, now)
