"""
Notification gateway.

Fans a message out over push, real-time socket and SMS. Each channel is
independent and every attempt is bounded by ``delivery_timeout_seconds`` so a
stuck provider never holds up the other channels or the next booking.
"""

import asyncio
from typing import Any, Dict, Optional

from config import settings
from utils.exceptions import DeliveryTimeoutError, NotificationError
from utils.logging_config import setup_logging

from .push import PushClient
from .realtime import SocketEmitter
from .sms import SmsClient

logger = setup_logging(
    name=__name__,
    log_level=settings.log_level,
    log_file="notifications.log",
    log_dir="logs",
)


class NotificationGateway:
    """Best-effort delivery to technicians and customers."""

    def __init__(
        self,
        push: PushClient,
        sms: SmsClient,
        socket: Optional[SocketEmitter] = None,
        timeout: Optional[float] = None,
    ):
        self.push = push
        self.sms = sms
        self.socket = socket
        self.timeout = timeout or settings.delivery_timeout_seconds

    @property
    def has_socket(self) -> bool:
        """True when a live real-time channel is available."""
        return self.socket is not None

    async def send_push(
        self,
        target_id: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Send a push notification. Returns False on failure or timeout."""
        try:
            await asyncio.wait_for(
                self.push.send(target_id, title, body, data), timeout=self.timeout
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Push to {target_id} timed out after {self.timeout}s")
        except NotificationError as e:
            logger.warning(f"Push to {target_id} failed: {e}")
        return False

    async def send_socket_event(
        self, room: str, event: str, payload: Dict[str, Any]
    ) -> None:
        """Fire-and-forget socket event. Never raises."""
        if self.socket is None:
            return

        try:
            await asyncio.wait_for(
                self.socket.emit(room, event, payload), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Socket event {event} to {room} timed out")
        except Exception as e:
            logger.warning(f"Socket event {event} to {room} failed: {e}")

    async def send_sms(self, phone: str, text: str) -> bool:
        """
        Send an SMS.

        Raises:
            DeliveryTimeoutError: If the provider does not answer in time
            SmsDeliveryError: If the provider rejects the message
        """
        try:
            await asyncio.wait_for(self.sms.send(phone, text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise DeliveryTimeoutError(
                f"SMS to {phone} timed out after {self.timeout}s"
            ) from e
        return True

    async def close(self) -> None:
        await self.push.close()
        await self.sms.close()
        if self.socket is not None:
            await self.socket.close()


# Global gateway instance
_gateway: Optional[NotificationGateway] = None


def get_notification_gateway() -> NotificationGateway:
    """Get or create the notification gateway."""
    global _gateway
    if _gateway is None:
        socket = SocketEmitter.from_url(settings.redis_url) if settings.redis_url else None
        if socket is None:
            logger.info("Redis URL not configured, socket events disabled")
        _gateway = NotificationGateway(push=PushClient(), sms=SmsClient(), socket=socket)
    return _gateway
