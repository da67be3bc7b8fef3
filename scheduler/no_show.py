"""
No-show safety job.

A technician who accepted a booking but is still ``accepted`` 30 minutes
after the scheduled start is treated as a no-show: the booking is unassigned,
returned to ``requested``, re-broadcast, and the customer is told.
"""

from datetime import datetime, timedelta
from typing import Optional

from config import settings
from db import NOT_NULL, REMINDER_COLUMNS, get_booking_store
from matching import get_matching_client
from models.booking import BookingStatus
from notifications import notify_customer_of_rebroadcast
from utils.datetime_utils import utc_now
from utils.logging_config import get_job_logger, setup_logging

logger = get_job_logger(
    setup_logging(
        name=__name__, log_level=settings.log_level, log_file="scheduler.log", log_dir="logs"
    ),
    "NOSHOW",
)

NO_SHOW_EXPECTED = {
    "status": BookingStatus.ACCEPTED.value,
    "no_show_at": None,
}


def no_show_changes(now: datetime) -> dict:
    """Unassign the technician and reset the assignment's reminder flags."""
    changes = {
        "technician_id": None,
        "assigned_at": None,
        "status": BookingStatus.REQUESTED.value,
        "no_show_at": now,
    }
    changes.update({column: False for column in REMINDER_COLUMNS})
    return changes


async def handle_no_show_safety(now: Optional[datetime] = None) -> int:
    """
    Recover accepted bookings whose technician never started.

    The recovery is one conditional update guarded on ``status = accepted``
    and ``no_show_at IS NULL``; losing that race (another worker, or the
    technician moving the booking on) is a silent skip. Re-broadcast and the
    customer notification are best-effort and never undo the transition.

    Returns:
        Number of bookings recovered by this tick
    """
    now = now or utc_now()
    cutoff = now - timedelta(minutes=settings.no_show_grace_minutes)

    try:
        store = get_booking_store()
        no_shows = await store.find_by_status_and_window(
            BookingStatus.ACCEPTED,
            upper=cutoff,
            extra={"no_show_at": None, "technician_id": NOT_NULL},
            columns=["id", "status", "customer_id", "technician_id", "scheduled_at"],
        )
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 0

    if not no_shows:
        logger.debug("No no-show bookings detected")
        return 0

    logger.info(f"Detected {len(no_shows)} no-show booking(s)")

    matching = get_matching_client()
    recovered = 0

    for booking in no_shows:
        previous_technician_id = booking.technician_id
        try:
            updated = await store.conditional_update(
                booking.id, expected=NO_SHOW_EXPECTED, changes=no_show_changes(now)
            )
        except Exception as e:
            logger.error(f"Error for booking {booking.id}: {e}", exc_info=True)
            continue

        if updated is None:
            # Already handled by another worker, or the job has started
            continue

        recovered += 1
        logger.info(
            f"Booking {booking.id}: Unassigned technician {previous_technician_id}. "
            f"Re-broadcasting..."
        )

        try:
            result = await matching.broadcast(booking.id)
            logger.info(f"Booking {booking.id} re-broadcast to {result.count} technicians")
        except Exception as e:
            logger.error(f"Re-broadcast failed for booking {booking.id}: {e}", exc_info=True)

        await notify_customer_of_rebroadcast(booking, store=store, now=now)

    return recovered
