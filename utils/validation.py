"""
Phone number validation for outgoing SMS.
"""

import re
from typing import Optional

_E164_PATTERN = re.compile(r"^\+?[1-9]\d{6,14}$")


def _clean(phone: str) -> str:
    # Remove spaces, dashes, parentheses
    return re.sub(r"[\s\-\(\)]", "", phone)


def validate_phone(phone: str) -> bool:
    """
    Validate phone number format.
    Accepts international format with optional + prefix.

    Args:
        phone: Phone number string

    Returns:
        True if valid format, False otherwise
    """
    if not phone or not isinstance(phone, str):
        return False

    return bool(_E164_PATTERN.match(_clean(phone)))


def to_e164(phone: str, default_country_code: str) -> Optional[str]:
    """
    Normalize a stored mobile number to E.164.

    Numbers without a ``+`` prefix get ``default_country_code`` prepended
    (a leading trunk ``0`` is dropped first).

    Returns:
        The E.164 number, or None if the input is not a valid phone number
    """
    if not phone or not isinstance(phone, str):
        return None

    cleaned = _clean(phone)
    if not cleaned.startswith("+"):
        cleaned = f"{default_country_code}{cleaned.lstrip('0')}"

    return cleaned if validate_phone(cleaned) else None
