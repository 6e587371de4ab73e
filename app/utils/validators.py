"""Input format checks shared by the OTP and registration services"""
import re
from typing import Optional

PHONE_PATTERN = re.compile(r"^\+91\d{10}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EMAIL_MAX_LENGTH = 255  # users.email / otp_verification.email column width

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 20


def is_valid_phone(phone: Optional[str]) -> bool:
    """``+91`` followed by exactly 10 digits, e.g. ``+919876543210``."""
    return bool(phone) and PHONE_PATTERN.match(phone) is not None


def is_valid_email(email: Optional[str]) -> bool:
    """Permissive ``local@domain.tld`` check, not full RFC validation."""
    return (
        bool(email)
        and len(email) <= EMAIL_MAX_LENGTH
        and EMAIL_PATTERN.match(email) is not None
    )


def is_valid_password(password: Optional[str]) -> bool:
    return password is not None and PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH
