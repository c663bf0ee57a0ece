"""Reusable field validators shared by the step and request schemas.

Provides:
- Email validation
- E.164 phone validation (country code required)
- File reference validation for file-array fields
"""

import re
from typing import Any

from app.wizard.files import PendingFile


# Regex patterns
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_REGEX = re.compile(r"^\+[1-9]\d{1,14}$")  # E.164, leading + required
URL_REGEX = re.compile(r"^https?://\S+$", re.IGNORECASE)


def validate_email(value: str) -> str:
    """Validate email address.

    Args:
        value: Email address

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email is invalid
    """
    value = value.strip().lower()

    if len(value) > 254:  # RFC 5321
        raise ValueError("Email address too long")

    if not EMAIL_REGEX.match(value):
        raise ValueError("Invalid email format")

    return value


def validate_phone(value: str) -> str:
    """Validate phone number (E.164 format, country code required).

    Spaces and dashes are stripped before matching.

    Raises:
        ValueError: If phone number is invalid
    """
    value = value.replace(" ", "").replace("-", "")

    if not PHONE_REGEX.match(value):
        raise ValueError("Invalid phone number format. Must include country code")

    return value


def is_staged_file(value: Any) -> bool:
    """True for a staged-upload descriptor stored in a wizard draft."""
    return isinstance(value, dict) and "staged" in value and "name" in value


def validate_file_refs(values: list[Any]) -> list[Any]:
    """Each entry is an uploaded file URL, a staged upload, or a pending file.

    Pending files are only size/type checked at upload time.
    """
    for item in values:
        if isinstance(item, str):
            if not URL_REGEX.match(item):
                raise ValueError("Invalid file URL")
        elif not (isinstance(item, PendingFile) or is_staged_file(item)):
            raise ValueError("Invalid file entry")
    return values
