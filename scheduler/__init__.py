"""Timed jobs driving scheduled bookings through their lifecycle."""

from .activation import activate_scheduled_bookings
from .jobs import setup_scheduler, shutdown_scheduler
from .no_show import handle_no_show_safety
from .reminders import (
    send_reminders,
    send_reminders_1h,
    send_reminders_15min,
    send_reminders_24h,
)

__all__ = [
    "activate_scheduled_bookings",
    "handle_no_show_safety",
    "send_reminders",
    "send_reminders_1h",
    "send_reminders_15min",
    "send_reminders_24h",
    "setup_scheduler",
    "shutdown_scheduler",
]
