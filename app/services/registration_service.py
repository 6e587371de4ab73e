"""Registration transaction: OTP re-check, user + wallet creation, referral bonus.

Everything between the OTP re-check and the referral credit happens in one
session transaction with a single commit. Any failure rolls back all of it,
including the OTP consumed flag, so a retry with the same code still works.
"""
import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.errors.exceptions import (
    IdentifierSpaceExhausted,
    OtpInvalid,
    PersistenceError,
    ServiceError,
    UserExists,
    ValidationError,
)
from app.models.user import User
from app.models.wallet import Wallet
from app.services.auth_service import (
    create_session_token,
    find_user_by_phone_or_email,
    get_password_hash,
)
from app.services.otp_service import find_matching_otp
from app.utils.identifiers import generate_referral_code, generate_user_id, generate_username
from app.utils.logger import log_auth_event
from app.utils.time_utils import utc_now
from app.utils.validators import is_valid_email, is_valid_password, is_valid_phone

logger = logging.getLogger(__name__)


def validate_registration(
    phone: Optional[str],
    email: Optional[str],
    password: Optional[str],
    otp: Optional[str],
) -> None:
    """Raise ``ValidationError`` for the first failing precondition"""
    if not phone or not email or not password or not otp:
        raise ValidationError("All fields are required")
    if not is_valid_phone(phone):
        raise ValidationError("Invalid phone number")
    if not is_valid_email(email):
        raise ValidationError("Invalid email address")
    if not is_valid_password(password):
        raise ValidationError("Password must be between 6 and 20 characters")


def generate_unique(
    db: Session,
    column,
    factory: Callable[[], str],
    max_attempts: Optional[int] = None,
) -> str:
    """
    Draw candidates from *factory* until one is unused in *column*.

    Gives up after *max_attempts* (MAX_IDENTIFIER_ATTEMPTS by default). The
    unique constraint on the column still decides races between requests.
    """
    attempts = max_attempts or settings.MAX_IDENTIFIER_ATTEMPTS
    for _ in range(attempts):
        candidate = factory()
        taken = db.query(User.id).filter(column == candidate).first()
        if taken is None:
            return candidate

    raise IdentifierSpaceExhausted(
        f"No unused {column.key} after {attempts} attempts"
    )


def resolve_referrer(db: Session, referral_code: Optional[str]) -> Optional[User]:
    """User owning *referral_code*, or None. Unknown codes are not an error."""
    if not referral_code or not referral_code.strip():
        return None
    return db.query(User).filter(
        User.referral_code == referral_code.strip().upper()
    ).first()


def apply_referral_bonus(db: Session, referrer_id: int) -> None:
    """Count the referral and credit the bonus to the referrer's wallet"""
    bonus = settings.REFERRAL_BONUS

    db.query(User).filter(User.id == referrer_id).update(
        {User.total_referrals: User.total_referrals + 1},
        synchronize_session=False,
    )
    db.query(Wallet).filter(Wallet.user_id == referrer_id).update(
        {
            Wallet.total_balance: Wallet.total_balance + bonus,
            Wallet.available_for_withdrawal: Wallet.available_for_withdrawal + bonus,
            Wallet.referral_bonus: Wallet.referral_bonus + bonus,
            Wallet.total_bonus_received: Wallet.total_bonus_received + bonus,
        },
        synchronize_session=False,
    )


def _create_user(
    db: Session,
    phone: str,
    email: str,
    password: str,
    otp: str,
    referral_code: Optional[str],
) -> User:
    otp_row = find_matching_otp(
        db, phone, otp.strip(), utc_now(), include_consumed=True, lock=True
    )
    if otp_row is None:
        raise OtpInvalid()
    otp_row.is_verified = True

    if find_user_by_phone_or_email(db, phone, email) is not None:
        raise UserExists()

    password_hash = get_password_hash(password)

    new_user_id = generate_unique(db, User.user_id, generate_user_id)
    new_username = generate_unique(db, User.username, generate_username)
    new_referral_code = generate_unique(db, User.referral_code, generate_referral_code)

    referrer = resolve_referrer(db, referral_code)

    user = User(
        user_id=new_user_id,
        username=new_username,
        full_name=email.split("@")[0][:100],
        email=email,
        phone_number=phone,
        password_hash=password_hash,
        referral_code=new_referral_code,
        referred_by_id=referrer.id if referrer else None,
        is_email_verified=True,
        is_phone_verified=True,
        is_active=True,
        wallet=Wallet(),
    )
    db.add(user)
    db.flush()

    if referrer is not None:
        apply_referral_bonus(db, referrer.id)

    return user


def register_user(
    db: Session,
    phone: Optional[str],
    email: Optional[str],
    password: Optional[str],
    otp: Optional[str],
    referral_code: Optional[str] = None,
) -> tuple[User, str]:
    """
    Run the whole registration as one unit of work.

    Returns ``(user, token)`` where *token* is a 7-day session credential.
    """
    validate_registration(phone, email, password, otp)

    try:
        user = _create_user(db, phone, email, password, otp, referral_code)
        db.commit()
    except PersistenceError as exc:
        db.rollback()
        log_auth_event("REGISTER", error=exc.message, phone=phone)
        raise
    except ServiceError as exc:
        db.rollback()
        log_auth_event("REGISTER REJECTED", exc.message, phone=phone, level=logging.WARNING)
        raise
    except IntegrityError as exc:
        # A concurrent request won the unique constraint
        db.rollback()
        logger.warning(f"Registration insert rejected for {phone}: {exc.orig}")
        if find_user_by_phone_or_email(db, phone, email) is not None:
            log_auth_event("REGISTER", error="duplicate phone/email on insert", phone=phone)
            raise UserExists() from exc
        log_auth_event("REGISTER", error=f"constraint violation: {exc.orig}", phone=phone)
        raise PersistenceError("Registration failed") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        log_auth_event("REGISTER", error=str(exc), phone=phone)
        raise PersistenceError("Registration failed") from exc

    db.refresh(user)
    token = create_session_token(user, settings.REGISTER_TOKEN_EXPIRE_MINUTES)
    log_auth_event(
        "REGISTER OK",
        f"username={user.username} referred_by={user.referred_by_id or '-'}",
        user_id=user.user_id,
        phone=user.phone_number,
    )
    return user, token
