"""
Twilio SMS client.
Sends text messages through the Twilio Messages REST API.
"""

from typing import Optional

import httpx

from config import settings
from utils.exceptions import SmsDeliveryError
from utils.validation import to_e164

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class SmsClient:
    """Sends one SMS per call."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._client = http_client or httpx.AsyncClient()

    async def send(self, phone: str, text: str) -> str:
        """
        Send an SMS.

        Args:
            phone: Recipient number, E.164 or national format
            text: Message body

        Returns:
            Twilio message SID

        Raises:
            SmsDeliveryError: If SMS is not configured, the number is invalid
                or Twilio rejects the message
        """
        if not settings.sms_enabled:
            raise SmsDeliveryError("Twilio credentials are not configured")

        to_phone = to_e164(phone, settings.sms_default_country_code)
        if not to_phone:
            raise SmsDeliveryError(f"Invalid phone number: {phone}")

        try:
            response = await self._client.post(
                TWILIO_MESSAGES_URL.format(sid=settings.twilio_account_sid),
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
                data={
                    "To": to_phone,
                    "From": settings.twilio_from_number,
                    "Body": text,
                },
            )
        except httpx.HTTPError as e:
            raise SmsDeliveryError(f"SMS to {to_phone} failed: {e}") from e

        if response.status_code not in (200, 201):
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            error_message = error_data.get("message", "Unknown error")
            error_code = error_data.get("code")
            raise SmsDeliveryError(
                f"[{error_code}] {error_message}" if error_code else error_message
            )

        return response.json().get("sid", "")

    async def close(self) -> None:
        await self._client.aclose()
