"""
Matching service client.

The matching service owns technician ranking and the job-offer broadcast;
this worker only asks it to broadcast a booking and reads back how many
technicians were notified. Broadcasting the same booking twice is safe.
"""

from typing import Optional

import httpx
from pydantic import BaseModel

from config import settings
from utils.exceptions import MatchingServiceError
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level=settings.log_level, log_file="matching.log", log_dir="logs"
)


class MatchResult(BaseModel):
    """Outcome of a broadcast."""

    count: int = 0


class MatchingClient:
    """HTTP client for ``POST /bookings/{id}/broadcast``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.matching_service_url or "").rstrip("/")
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout or settings.matching_timeout_seconds
        )

    async def broadcast(self, booking_id: str) -> MatchResult:
        """
        Find eligible technicians for a booking and send them the job offer.

        Args:
            booking_id: Booking to broadcast

        Returns:
            MatchResult with the number of technicians notified

        Raises:
            MatchingServiceError: If the service is unreachable, answers with
                an error status, or returns an unreadable payload
        """
        if not self.base_url:
            raise MatchingServiceError("Matching service URL is not configured")

        url = f"{self.base_url}/bookings/{booking_id}/broadcast"
        try:
            response = await self._client.post(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MatchingServiceError(
                f"Broadcast for booking {booking_id} failed with status "
                f"{e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise MatchingServiceError(
                f"Broadcast for booking {booking_id} failed: {e}"
            ) from e

        try:
            payload = response.json() if response.content else {}
            result = MatchResult(count=payload.get("count") or 0)
        except (ValueError, AttributeError) as e:
            raise MatchingServiceError(
                f"Unreadable broadcast response for booking {booking_id}: {e}"
            ) from e

        logger.debug(f"Booking {booking_id} broadcast to {result.count} technicians")
        return result

    async def close(self) -> None:
        await self._client.aclose()


# Global matching client instance
_matching_client: Optional[MatchingClient] = None


def get_matching_client() -> MatchingClient:
    """Get or create the matching client."""
    global _matching_client
    if _matching_client is None:
        _matching_client = MatchingClient()
    return _matching_client
