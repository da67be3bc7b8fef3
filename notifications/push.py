"""
Push notification client.
Posts FCM-style payloads to the configured push provider.
"""

from typing import Any, Dict, Optional

import httpx

from config import settings
from utils.exceptions import PushDeliveryError


class PushClient:
    """Sends a push notification to one recipient."""

    def __init__(
        self,
        service_url: Optional[str] = None,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.service_url = service_url or settings.push_service_url
        self.api_key = api_key or settings.push_api_key
        self._client = http_client or httpx.AsyncClient()

    async def send(
        self,
        target_id: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Deliver a push notification.

        Raises:
            PushDeliveryError: If the provider is not configured or rejects
                the notification
        """
        if not self.service_url:
            raise PushDeliveryError("Push service URL is not configured")

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "to": target_id,
            "notification": {"title": title, "body": body},
            "data": {key: str(value) for key, value in (data or {}).items()},
        }

        try:
            response = await self._client.post(
                self.service_url, json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            raise PushDeliveryError(f"Push to {target_id} failed: {e}") from e

        if response.status_code not in (200, 201, 202):
            raise PushDeliveryError(
                f"Push to {target_id} rejected with status {response.status_code}"
            )

    async def close(self) -> None:
        await self._client.aclose()
