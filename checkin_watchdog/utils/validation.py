"""Input validation utilities."""

import re


def validate_phone(phone: str) -> bool:
    """Validate phone number format (basic validation)."""
    if not phone:
        return False

    # Remove common formatting characters
    cleaned = re.sub(r'[^\d+]', '', phone)

    # Basic validation: starts with + or digit, 7-15 digits total
    pattern = r'^(\+?\d{7,15})$'
    return bool(re.match(pattern, cleaned))


def mask_phone_number(phone: str) -> str:
    """Mask phone number for logging."""
    if len(phone) <= 4:
        return phone

    return phone[:2] + "*" * max(0, len(phone) - 4) + phone[-2:]
