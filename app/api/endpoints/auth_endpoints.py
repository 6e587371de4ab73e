"""OTP, registration and login endpoints

Handlers are plain ``def`` so FastAPI runs them in its threadpool; a request
waiting for a pooled connection never blocks the event loop.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from app.core.config import settings
from app.core.dependencies import get_db
from app.errors.exceptions import (
    AccountLocked,
    BadRequestException,
    ForbiddenException,
    InternalServerException,
    InvalidCredentials,
    OtpInvalid,
    ServiceError,
    UnauthorizedException,
    UserExists,
    ValidationError,
)
from app.schemas.auth_schemas import (
    LoginRequest,
    LoginResponse,
    LoginUser,
    MessageResponse,
    RegisteredUser,
    RegisterRequest,
    RegisterResponse,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
)
from app.services.auth_service import login_user
from app.services.otp_service import issue_otp, verify_otp
from app.services.registration_service import register_user

router = APIRouter()
logger = logging.getLogger(__name__)


def to_http_exception(exc: ServiceError, failure_message: str):
    """Map a service error onto the HTTP error the client sees"""
    if isinstance(exc, (ValidationError, OtpInvalid, UserExists)):
        return BadRequestException(detail=exc.message)
    if isinstance(exc, InvalidCredentials):
        return UnauthorizedException(detail=exc.message)
    if isinstance(exc, AccountLocked):
        return ForbiddenException(detail=exc.message)
    # Persistence failures stay generic on the wire; details are in the log
    return InternalServerException(detail=failure_message)


@router.post(
    "/send-otp",
    response_model=SendOtpResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
)
def send_otp(body: SendOtpRequest, db: Session = Depends(get_db)):
    """
    ## Request a registration OTP

    Stores a 6-digit code valid for 10 minutes and emails it. The response
    is a success even when the email could not be sent; the code stays
    valid.

    - HTTP 400 → invalid phone (`+91` and 10 digits) or email.
    - HTTP 500 → the code could not be stored.
    """
    try:
        code, delivered = issue_otp(db, body.phone, body.email)
    except ServiceError as exc:
        raise to_http_exception(exc, "Failed to send OTP. Please try again.") from exc

    if not delivered:
        logger.warning(f"[SendOTP] Email delivery failed for {body.email}")

    return SendOtpResponse(
        message="OTP sent successfully to your email",
        otp=code if settings.EXPOSE_OTP_IN_RESPONSE else None,
    )


@router.post("/verify-otp", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def verify_otp_endpoint(body: VerifyOtpRequest, db: Session = Depends(get_db)):
    """
    ## Pre-flight OTP check

    Consumes the code on success. Registration re-checks it on its own.

    - HTTP 400 → "Invalid or expired OTP" (mismatch and expiry look the same).
    """
    try:
        verify_otp(db, body.phone, body.otp)
    except ServiceError as exc:
        raise to_http_exception(exc, "Failed to verify OTP") from exc

    return MessageResponse(message="OTP verified successfully")


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_200_OK)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """
    ## Register a new user

    Re-validates the OTP, creates the user and wallet, credits the referrer
    when `referralCode` resolves, and returns a 7-day session token.

    - HTTP 400 → validation failure, invalid/expired OTP, or the phone/email
      is already registered.
    - HTTP 500 → storage failure; nothing was written.
    """
    try:
        user, token = register_user(
            db,
            phone=body.phone,
            email=body.email,
            password=body.password,
            otp=body.otp,
            referral_code=body.referral_code,
        )
    except ServiceError as exc:
        raise to_http_exception(exc, "Registration failed") from exc

    return RegisterResponse(token=token, user=RegisteredUser.from_user(user))


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """
    ## Login with phone or email

    Returns a 30-day session token and the user's wallet totals.

    - HTTP 401 → unknown/inactive account or wrong password.
    - HTTP 403 → account temporarily locked after repeated failures.
    """
    try:
        user, token = login_user(db, body.password, phone=body.phone, email=body.email)
    except ServiceError as exc:
        raise to_http_exception(exc, "Login failed") from exc

    return LoginResponse(token=token, user=LoginUser.from_user(user))
