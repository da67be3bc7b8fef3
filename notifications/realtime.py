"""
Real-time socket events.

The worker holds no socket connections itself. Events are published on a
Redis pub/sub channel and the real-time server relays them to the room
(``technician_<id>`` / ``customer_<id>``) named in the envelope.
"""

import json
from typing import Any, Dict, Optional

import redis.asyncio as aioredis

from config import settings


def technician_room(technician_id: str) -> str:
    return f"technician_{technician_id}"


def customer_room(customer_id: str) -> str:
    return f"customer_{customer_id}"


class SocketEmitter:
    """Publishes socket events for the real-time relay."""

    def __init__(self, redis_client: aioredis.Redis, channel: Optional[str] = None):
        self._redis = redis_client
        self.channel = channel or settings.socket_channel

    @classmethod
    def from_url(cls, redis_url: str) -> "SocketEmitter":
        return cls(aioredis.from_url(redis_url))

    async def emit(self, room: str, event: str, payload: Dict[str, Any]) -> int:
        """
        Publish an event to a room.

        Returns:
            Number of relay subscribers that received the envelope
        """
        envelope = {"room": room, "event": event, "data": payload}
        return await self._redis.publish(self.channel, json.dumps(envelope, default=str))

    async def close(self) -> None:
        await self._redis.aclose()
