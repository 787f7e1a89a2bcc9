"""
Input validation for values that reach the auth provider or the record store
"""
import re
import logging
from typing import Tuple

from control_panel.core.errors import ValidationError

logger = logging.getLogger(__name__)

# Upstream ids are opaque; they only ever reach the store as an equality value.
# Whitespace, control characters and slashes never occur in them.
TRACK_ID_PATTERN = re.compile(r"^[^\s/\x00-\x1f\x7f]{1,256}$")

def validate_credentials(email: str, password: str) -> Tuple[str, str]:
    """
    Validate login input before contacting the auth provider

    The email is trimmed, the password is passed through as typed.

    Raises:
        ValidationError: If either value is missing or empty
    """
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Please fill in both email and password")

    return email, password

def validate_track_id(value: str, field_name: str = "Track ID") -> str:
    """
    Validate a track id taken from a URL or form

    Raises:
        ValidationError: If the id is empty or contains unexpected characters
    """
    if not value:
        raise ValidationError(f"{field_name} is required")

    if not TRACK_ID_PATTERN.match(value):
        logger.warning(f"Invalid {field_name} format attempted: {value[:64]!r}")
        raise ValidationError(f"Invalid {field_name} format")

    return value
