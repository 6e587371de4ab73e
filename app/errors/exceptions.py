"""Custom exceptions for error handling

Two families live here:

* ``ServiceError`` subclasses are raised by the service layer and carry a
  user-safe message. They know nothing about HTTP.
* ``BaseHTTPException`` subclasses are raised by endpoints after
  translating a ``ServiceError``.
"""
from fastapi import HTTPException, status


# ── service (domain) errors ───────────────────────────────────────────────────

class ServiceError(Exception):
    """Base class for errors raised by the service layer"""
    message = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed or missing input; raised before any state change"""
    message = "Invalid request"


class OtpInvalid(ServiceError):
    """No matching, unexpired OTP (mismatch and expiry look the same)"""
    message = "Invalid or expired OTP"


class UserExists(ServiceError):
    """Phone or email already registered"""
    message = "User already exists with this phone or email"


class PersistenceError(ServiceError):
    """Storage unavailable or a constraint rejected the write"""
    message = "Database operation failed"


class IdentifierSpaceExhausted(PersistenceError):
    """Could not draw an unused identifier within the attempt budget"""
    message = "Could not generate a unique identifier"


class DeliveryError(ServiceError):
    """OTP email could not be sent; logged, never surfaced"""
    message = "Failed to deliver email"


class InvalidCredentials(ServiceError):
    """Unknown/inactive account or wrong password"""
    message = "Invalid credentials"


class AccountLocked(ServiceError):
    """Too many failed logins; lock window still open"""
    message = "Account is temporarily locked. Please try again later."


# ── HTTP errors ───────────────────────────────────────────────────────────────

class BaseHTTPException(HTTPException):
    """Base exception class for all custom HTTP exceptions"""
    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.detail,
            headers=headers
        )


class BadRequestException(BaseHTTPException):
    """400 Bad Request"""
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Bad request"


class UnauthorizedException(BaseHTTPException):
    """401 Unauthorized"""
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Not authenticated"

    def __init__(self, detail: str = None):
        super().__init__(
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenException(BaseHTTPException):
    """403 Forbidden"""
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Forbidden"


class InternalServerException(BaseHTTPException):
    """500 Internal Server Error"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"

