"""Reminder stages and notification payload models."""

from datetime import timedelta
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel


class ReminderKind(str, Enum):
    """Lead-time reminder stage sent to the assigned technician."""

    H24 = "h24"
    H1 = "h1"
    MIN15 = "min15"

    @property
    def flag_column(self) -> str:
        """Store column tracking whether this stage already fired."""
        return f"reminders_sent_{self.value}"

    @property
    def window(self) -> Tuple[timedelta, timedelta]:
        """Selection window ``(lower, upper)`` relative to now, both inclusive."""
        return _WINDOWS[self]

    @property
    def job_tag(self) -> str:
        return _JOB_TAGS[self]

    @property
    def sends_sms(self) -> bool:
        """SMS goes out only where urgency is high."""
        return self in (ReminderKind.H1, ReminderKind.MIN15)


_WINDOWS = {
    ReminderKind.H24: (timedelta(hours=23), timedelta(hours=25)),
    ReminderKind.H1: (timedelta(minutes=55), timedelta(minutes=65)),
    ReminderKind.MIN15: (timedelta(minutes=10), timedelta(minutes=20)),
}

_JOB_TAGS = {
    ReminderKind.H24: "24H",
    ReminderKind.H1: "1H",
    ReminderKind.MIN15: "15MIN",
}


class ReminderMessage(BaseModel):
    """Technician-facing reminder text."""

    title: str
    body: str


class DeliveryResult(BaseModel):
    """Outcome of a reminder delivery attempt."""

    success: bool
    reason: Optional[str] = None


class Contact(BaseModel):
    """Display name and phone resolved from an identity record."""

    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
