"""
Configuration module for the scheduled booking lifecycle worker.
Loads environment variables and provides typed configuration.
"""

from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.exceptions import ConfigurationError

# Load .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"

    # Booking store
    booking_store_backend: str = "supabase"  # supabase, memory
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    bookings_table: str = "service_bookings"
    technician_profiles_table: str = "technician_profiles"
    users_table: str = "users"

    # Redis (APScheduler job store + real-time socket relay)
    redis_url: Optional[str] = None  # e.g. redis://localhost:6379/0
    socket_channel: str = "socket_events"

    # Matching service
    matching_service_url: Optional[str] = None
    matching_timeout_seconds: float = 15.0

    # Push notifications
    push_service_url: Optional[str] = None
    push_api_key: Optional[str] = None

    # Twilio SMS
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_from_number: Optional[str] = None
    sms_brand_name: str = "Bookings"
    sms_default_country_code: str = "+91"

    # Delivery
    delivery_timeout_seconds: float = 10.0
    display_timezone: str = "Asia/Kolkata"

    # Job cadence
    activation_interval_minutes: int = 5
    activation_lead_minutes: int = 15
    reminder_24h_interval_minutes: int = 15
    reminder_1h_interval_minutes: int = 5
    reminder_15min_interval_minutes: int = 1
    no_show_interval_minutes: int = 2
    no_show_grace_minutes: int = 30

    # Overlapping ticks of the same job are tolerated by the conditional updates
    job_max_instances: int = 2
    job_misfire_grace_seconds: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def sms_enabled(self) -> bool:
        """True when all Twilio credentials are present."""
        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and self.twilio_from_number
        )

    def delivery_warnings(self) -> List[str]:
        """
        Describe notification channels that are not configured.

        Reminder stages are attempted at most once, so a missing channel
        silently uses them up. The worker logs these at startup.
        """
        warnings = []
        if not self.push_service_url:
            warnings.append(
                "push_service_url is not set: every technician push will fail "
                "and reminder stages will be marked sent without delivery"
            )
        if not self.sms_enabled:
            warnings.append("Twilio credentials are not set: SMS is disabled")
        if not self.redis_url:
            warnings.append("redis_url is not set: socket events are disabled")
        return warnings

    def validate_all_required(self) -> None:
        """
        Validate that all settings required by the selected backends are present.

        Raises:
            ConfigurationError: If required fields are missing or invalid
        """
        required_fields = ["matching_service_url"]

        if self.booking_store_backend == "supabase":
            required_fields += ["supabase_url", "supabase_key"]
        elif self.booking_store_backend != "memory":
            raise ConfigurationError(
                f"Unknown booking store backend: {self.booking_store_backend}. "
                f"Expected 'supabase' or 'memory'."
            )

        missing = []
        for field in required_fields:
            value = getattr(self, field, None)

            if not value:
                missing.append(field)
                continue

            # Check for placeholder values
            if str(value).lower().startswith("your_"):
                missing.append(field)

        if missing:
            raise ConfigurationError(
                f"Missing or invalid required configuration: "
                f"{', '.join(missing)}. "
                f"Please check your .env file and ensure all required "
                f"values are set."
            )


# Global settings instance
settings = Settings()
