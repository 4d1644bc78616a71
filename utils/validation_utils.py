"""
utils/validation_utils.py

Purpose: Input validation

- Uzbek phone number format and carrier detection
- Order form field rules (all evaluated, all reported)
- Telegram ID and verification code formats
- Input sanitization
"""

import re
from typing import Dict, Optional

PHONE_PATTERN = re.compile(r"^\+998\d{9}$")
PHONE_FORMAT_HINT = "Format: +998901234567"
REQUIRED = "Required"

# Two digits after the 998 country code
CARRIER_PREFIXES = {
    "90": "Beeline", "91": "Beeline",
    "93": "Ucell", "94": "Ucell", "50": "Ucell",
    "99": "Uzmobile", "95": "Uzmobile", "77": "Uzmobile",
    "97": "Mobiuz", "88": "Mobiuz",
    "33": "Humans",
    "98": "Perfectum",
}


def validate_phone_number(phone: str) -> bool:
    """
    Validates Uzbek mobile number format: +998 followed by exactly 9 digits.

    Args:
        phone: Phone number string

    Returns:
        True if valid
    """
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone))


def detect_carrier(phone: str) -> Optional[str]:
    """
    Detects the mobile carrier from the operator code.

    Args:
        phone: Phone number, e.g. "+998901234567"

    Returns:
        Carrier name or None if unknown / too short
    """
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) < 5:
        return None
    return CARRIER_PREFIXES.get(digits[3:5])


def validate_order_form(
    first_name: str,
    phone: str,
    telegram_username: str,
    comment: str
) -> Dict[str, str]:
    """
    Checks every order form rule independently.

    Returns:
        Mapping of camelCase field name to error message; empty when valid
    """
    errors: Dict[str, str] = {}

    if not (first_name or "").strip():
        errors["firstName"] = REQUIRED
    if not validate_phone_number(phone):
        errors["phone"] = PHONE_FORMAT_HINT
    if not (telegram_username or "").strip():
        errors["telegramUsername"] = REQUIRED
    if not (comment or "").strip():
        errors["comment"] = REQUIRED

    return errors


def validate_telegram_id(telegram_id: str) -> bool:
    """
    Telegram numeric user id, at least 5 digits.
    """
    if not telegram_id:
        return False
    telegram_id = telegram_id.strip()
    return telegram_id.isdigit() and len(telegram_id) >= 5


def normalize_telegram_username(username: str) -> str:
    """Strips a leading @ so links and mentions can be built consistently."""
    return (username or "").strip().lstrip("@")


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitizes free text before it is embedded in HTML bot messages.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]

    # Telegram HTML parse mode rejects stray tags
    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")

    return text.strip()
