"""Error handling module"""
from app.errors.exceptions import (
    ServiceError,
    ValidationError,
    OtpInvalid,
    UserExists,
    PersistenceError,
    IdentifierSpaceExhausted,
    DeliveryError,
    InvalidCredentials,
    AccountLocked,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    InternalServerException,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "OtpInvalid",
    "UserExists",
    "PersistenceError",
    "IdentifierSpaceExhausted",
    "DeliveryError",
    "InvalidCredentials",
    "AccountLocked",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "InternalServerException",
]
