"""Booking models for scheduled service jobs."""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    """Booking status."""

    SCHEDULED = "scheduled"
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    # Downstream states owned by the execution flow
    ON_THE_WAY = "on_the_way"
    REACHED = "reached"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RemindersSent(BaseModel):
    """Reminder stages already fired for the current technician assignment."""

    h24: bool = False
    h1: bool = False
    min15: bool = False


class AddressSnapshot(BaseModel):
    """Service address captured when the booking was created."""

    line1: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class GeoPoint(BaseModel):
    """GeoJSON point, coordinates are ``[longitude, latitude]``."""

    type: str = "Point"
    coordinates: List[float] = Field(default_factory=list)


class Booking(BaseModel):
    """Booking model."""

    id: str
    status: BookingStatus = BookingStatus.SCHEDULED
    scheduled_at: Optional[datetime] = None
    technician_id: Optional[str] = None
    customer_id: Optional[str] = None
    reminders_sent: RemindersSent = Field(default_factory=RemindersSent)
    no_show_at: Optional[datetime] = None
    assigned_at: Optional[datetime] = None
    address_snapshot: Optional[AddressSnapshot] = None
    location: Optional[GeoPoint] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "id": "uuid-here",
                "status": "accepted",
                "scheduled_at": "2026-01-01T10:00:00+00:00",
                "technician_id": "uuid-here",
                "customer_id": "uuid-here",
                "reminders_sent": {"h24": False, "h1": False, "min15": False},
            }
        }

    def navigation_coordinates(self) -> Optional[Tuple[float, float]]:
        """
        Return ``(latitude, longitude)`` of the service location.

        The address snapshot wins over the GeoJSON point; None if neither
        carries both coordinates.
        """
        lat = self.address_snapshot.latitude if self.address_snapshot else None
        lng = self.address_snapshot.longitude if self.address_snapshot else None

        if self.location and len(self.location.coordinates) >= 2:
            if lat is None:
                lat = self.location.coordinates[1]
            if lng is None:
                lng = self.location.coordinates[0]

        if lat is None or lng is None:
            return None
        return lat, lng
