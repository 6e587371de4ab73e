"""Candidate generators for public identifiers and OTP codes.

Nothing here checks uniqueness; callers draw again on collision (see
``registration_service.generate_unique``).
"""
import secrets
import string

from app.utils.time_utils import epoch_millis

ID_PREFIX = "BP"
ALPHABET = string.ascii_uppercase + string.digits  # 36 symbols

USERNAME_RANDOM_LENGTH = 5
REFERRAL_CODE_LENGTH = 8


def _random_symbols(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_user_id() -> str:
    """``BP`` + last 8 digits of the epoch milliseconds + 4 random digits."""
    timestamp = str(epoch_millis())[-8:]
    suffix = 1000 + secrets.randbelow(9000)
    return f"{ID_PREFIX}{timestamp}{suffix}"


def generate_username() -> str:
    """``BP`` + 5 alphanumeric symbols (7 characters)."""
    return ID_PREFIX + _random_symbols(USERNAME_RANDOM_LENGTH)


def generate_referral_code() -> str:
    """8 alphanumeric symbols."""
    return _random_symbols(REFERRAL_CODE_LENGTH)


def generate_otp_code() -> str:
    """Uniform 6-digit code in 100000–999999."""
    return str(100000 + secrets.randbelow(900000))
