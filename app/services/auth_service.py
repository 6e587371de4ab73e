"""Authentication service with password hashing, session tokens and login"""
from datetime import timedelta, datetime, timezone
from typing import Optional
import logging

from passlib.context import CryptContext
from jose import JWTError, jwt
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.errors.exceptions import (
    AccountLocked,
    InvalidCredentials,
    PersistenceError,
    ValidationError,
)
from app.models.user import User
from app.schemas.auth_schemas import SessionClaims
from app.utils.logger import log_auth_event
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a hashed password"""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt (cost from BCRYPT_ROUNDS)"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta) -> str:
    """
    Create a signed JWT carrying *data* and an ``exp`` claim
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_session_token(user: User, expires_minutes: int) -> str:
    """
    Mint a session credential for *user*.

    Registration passes REGISTER_TOKEN_EXPIRE_MINUTES (7 days), login passes
    LOGIN_TOKEN_EXPIRE_MINUTES (30 days).
    """
    return create_access_token(
        data={
            "sub": str(user.id),
            "user_id": user.user_id,
            "phone": user.phone_number,
            "email": user.email,
        },
        expires_delta=timedelta(minutes=expires_minutes),
    )


def decode_session_token(token: str) -> Optional[SessionClaims]:
    """
    Decode and validate a session token; None if the signature or expiry is bad
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT decode error: {str(e)}")
        return None

    sub = payload.get("sub")
    try:
        internal_id = int(sub)
    except (ValueError, TypeError):
        return None

    return SessionClaims(
        id=internal_id,
        user_id=payload.get("user_id"),
        phone=payload.get("phone"),
        email=payload.get("email"),
    )


def find_user_by_phone_or_email(db: Session, phone: str, email: str) -> Optional[User]:
    """Combined check: callers cannot tell which of the two matched"""
    return db.query(User).filter(
        or_(User.phone_number == phone, User.email == email)
    ).first()


def _record_failed_login(db: Session, user: User, now: datetime) -> None:
    user.login_attempts = (user.login_attempts or 0) + 1
    if user.login_attempts >= settings.MAX_LOGIN_ATTEMPTS:
        user.lock_until = now + timedelta(minutes=settings.LOCKOUT_MINUTES)
        user.login_attempts = 0
        log_auth_event(
            "LOGIN LOCKOUT",
            f"locked until {user.lock_until:%Y-%m-%d %H:%M:%S}",
            user_id=user.user_id,
            phone=user.phone_number,
            level=logging.WARNING,
        )


def login_user(
    db: Session,
    password: Optional[str],
    phone: Optional[str] = None,
    email: Optional[str] = None,
) -> tuple[User, str]:
    """
    Authenticate by phone (preferred) or email and return (user, token).

    Wrong passwords are counted; after MAX_LOGIN_ATTEMPTS consecutive
    failures the account is locked for LOCKOUT_MINUTES.
    """
    if (not phone and not email) or not password:
        raise ValidationError("Phone/Email and password are required")

    query = db.query(User).filter(User.is_active == True)  # noqa: E712
    if phone:
        user = query.filter(User.phone_number == phone).first()
    else:
        user = query.filter(User.email == email).first()

    if user is None:
        raise InvalidCredentials("User not found or account inactive")

    user_pk = user.id
    now = utc_now()
    if user.is_locked(now):
        raise AccountLocked()

    try:
        if not verify_password(password, user.password_hash):
            _record_failed_login(db, user, now)
            db.commit()
            raise InvalidCredentials("Invalid password")

        user.login_attempts = 0
        user.lock_until = None
        user.last_login_at = now
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Login persistence failure for user {user_pk}: {exc}")
        raise PersistenceError() from exc

    db.refresh(user)
    token = create_session_token(user, settings.LOGIN_TOKEN_EXPIRE_MINUTES)
    log_auth_event("LOGIN OK", user_id=user.user_id, phone=user.phone_number)
    return user, token
