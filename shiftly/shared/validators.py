"""Shared validation utilities"""

import re
import uuid
from typing import Optional

from ..utils.timezone_utils import is_valid_timezone

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z\d]).{8,}$")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def validate_password(password: Optional[str]) -> bool:
    """At least 8 characters with a lowercase, an uppercase, a digit and a symbol"""
    if not password:
        return False
    return bool(PASSWORD_PATTERN.match(password))


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_timezone(tz: Optional[str]) -> Optional[str]:
    """Raises ValueError for names that are not IANA zones"""
    if tz is None:
        return tz
    tz = tz.strip()
    if not is_valid_timezone(tz):
        raise ValueError(f"Invalid timezone: {tz}")
    return tz


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    """HH:MM in 24h format"""
    if value is None:
        return value
    if not re.match(r"^([01]\d|2[0-3]):[0-5]\d$", value):
        raise ValueError("Time must be in HH:MM format")
    return value
