"""OTP issuance and verification.

One matching rule is used everywhere: the newest row for (phone, code) whose
``expires_at`` is still in the future. The verifier also requires the row to
be unconsumed; registration does not (see ``find_matching_otp``).
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.errors.exceptions import DeliveryError, OtpInvalid, PersistenceError, ValidationError
from app.models.otp import OtpVerification
from app.utils.email import send_otp_email
from app.utils.identifiers import generate_otp_code
from app.utils.logger import log_auth_event
from app.utils.time_utils import utc_now
from app.utils.validators import is_valid_email, is_valid_phone

logger = logging.getLogger(__name__)


def issue_otp(db: Session, phone: Optional[str], email: Optional[str]) -> tuple[str, bool]:
    """
    Store a fresh OTP for (*phone*, *email*) and try to email it.

    Returns ``(code, delivered)``. Delivery failure is logged, not raised:
    the row is already committed and the code stays usable.
    """
    if not is_valid_phone(phone):
        raise ValidationError("Invalid phone number")
    if not is_valid_email(email):
        raise ValidationError("Invalid email address")

    code = generate_otp_code()
    now = utc_now()
    otp_row = OtpVerification(
        phone=phone,
        email=email,
        otp_code=code,
        is_verified=False,
        expires_at=now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES),
        created_at=now,
    )

    try:
        db.add(otp_row)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log_auth_event("OTP ISSUE", error=str(exc), phone=phone)
        raise PersistenceError("Failed to store OTP") from exc

    try:
        send_otp_email(to=email, otp=code, phone=phone)
    except DeliveryError as exc:
        log_auth_event(
            "OTP DELIVERY",
            f"email failed, code {code} kept for {phone}: {exc.message}",
            phone=phone,
            level=logging.WARNING,
        )
        return code, False

    log_auth_event("OTP ISSUED", f"sent to {email}", phone=phone)
    return code, True


def find_matching_otp(
    db: Session,
    phone: str,
    code: str,
    now: datetime,
    include_consumed: bool = False,
    lock: bool = False,
) -> Optional[OtpVerification]:
    """
    Newest unexpired row for *phone* and *code*.

    ``include_consumed`` lets registration accept a code that the pre-flight
    verify step already marked. ``lock`` takes a row lock for the rest of the
    caller's transaction (ignored by sqlite).
    """
    query = db.query(OtpVerification).filter(
        OtpVerification.phone == phone,
        OtpVerification.otp_code == code,
        OtpVerification.expires_at > now,
    )
    if not include_consumed:
        query = query.filter(OtpVerification.is_verified == False)  # noqa: E712
    if lock:
        query = query.with_for_update()

    return query.order_by(
        OtpVerification.created_at.desc(),
        OtpVerification.id.desc(),
    ).first()


def verify_otp(db: Session, phone: Optional[str], code: Optional[str]) -> None:
    """
    Consume the matching OTP or raise ``OtpInvalid``.

    Mismatch and expiry raise the same error.
    """
    if not phone or not code:
        raise ValidationError("Phone and OTP are required")

    otp_row = find_matching_otp(db, phone, code.strip(), utc_now())
    if otp_row is None:
        log_auth_event("OTP VERIFY", "no matching OTP", phone=phone, level=logging.WARNING)
        raise OtpInvalid()

    try:
        otp_row.is_verified = True
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log_auth_event("OTP VERIFY", error=str(exc), phone=phone)
        raise PersistenceError("Failed to verify OTP") from exc

    log_auth_event("OTP VERIFIED", phone=phone)


def purge_expired_otps(db: Session, before: Optional[datetime] = None) -> int:
    """
    Delete OTP rows that expired before *before* (default: now).

    Not used on the request path; meant for a scheduled cleanup job.
    """
    cutoff = before or utc_now()
    try:
        deleted = (
            db.query(OtpVerification)
            .filter(OtpVerification.expires_at <= cutoff)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Failed to purge expired OTPs") from exc

    logger.info(f"Purged {deleted} expired OTP rows")
    return deleted
