"""
Custom exception classes for better error handling.
Provides specific error types instead of generic exceptions.
"""


class DatabaseError(Exception):
    """Base exception for booking store operations."""

    pass


class BookingNotFoundError(DatabaseError):
    """Raised when a booking is not found."""

    pass


class MatchingServiceError(Exception):
    """Raised when the matching service cannot broadcast a booking."""

    pass


class NotificationError(Exception):
    """Base exception for notification delivery."""

    pass


class DeliveryTimeoutError(NotificationError):
    """Raised when a delivery channel does not answer in time."""

    pass


class PushDeliveryError(NotificationError):
    """Raised when the push provider rejects or fails a notification."""

    pass


class SmsDeliveryError(NotificationError):
    """Raised when the SMS provider rejects or fails a message."""

    pass


class ConfigurationError(ValueError):
    """Raised when a required backend is not configured."""

    pass
