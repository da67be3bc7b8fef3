"""Technician and customer notifications (push, socket, SMS)."""

from .gateway import NotificationGateway, get_notification_gateway
from .reminders import (
    compose_reminder,
    format_scheduled_time,
    notify_customer_of_rebroadcast,
    send_navigation_prompt,
    send_scheduled_reminder,
)

__all__ = [
    "NotificationGateway",
    "compose_reminder",
    "format_scheduled_time",
    "get_notification_gateway",
    "notify_customer_of_rebroadcast",
    "send_navigation_prompt",
    "send_scheduled_reminder",
]
