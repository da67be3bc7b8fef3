"""
Activation job.
Promotes scheduled bookings that start within the lead window to
``requested`` and asks the matching service to broadcast them.
"""

from datetime import datetime, timedelta
from typing import Optional

from config import settings
from db import get_booking_store
from matching import get_matching_client
from models.booking import BookingStatus
from utils.datetime_utils import utc_now
from utils.logging_config import get_job_logger, setup_logging

logger = get_job_logger(
    setup_logging(
        name=__name__, log_level=settings.log_level, log_file="scheduler.log", log_dir="logs"
    ),
    "ACTIVATE",
)


async def activate_scheduled_bookings(now: Optional[datetime] = None) -> int:
    """
    Activate bookings due within ``activation_lead_minutes``.

    Bookings already past their start time are activated too. Each booking
    is flipped with a conditional update on ``status = scheduled``, so a
    concurrent tick that already activated it is skipped.

    Returns:
        Number of bookings activated by this tick
    """
    now = now or utc_now()
    window_end = now + timedelta(minutes=settings.activation_lead_minutes)

    try:
        store = get_booking_store()
        bookings = await store.find_by_status_and_window(
            BookingStatus.SCHEDULED,
            upper=window_end,
            columns=["id", "status", "scheduled_at"],
        )
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 0

    if not bookings:
        logger.debug("No scheduled bookings to activate")
        return 0

    logger.info(f"Found {len(bookings)} scheduled booking(s) to activate")

    matching = get_matching_client()
    activated = 0

    for booking in bookings:
        try:
            updated = await store.conditional_update(
                booking.id,
                expected={"status": BookingStatus.SCHEDULED.value},
                changes={"status": BookingStatus.REQUESTED.value},
            )
            if updated is None:
                logger.debug(f"Booking {booking.id} already activated, skipping")
                continue

            activated += 1
            result = await matching.broadcast(booking.id)
            logger.info(
                f"Booking {booking.id} activated. Broadcast to {result.count} technicians."
            )
        except Exception as e:
            logger.error(f"Error for booking {booking.id}: {e}", exc_info=True)

    return activated
