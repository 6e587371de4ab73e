"""OtpVerification: append-only log of issued one-time passcodes."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.db.base import Base


class OtpVerification(Base):
    """
    Holds a 6-digit code bound to a (phone, email) pair.

    Lifecycle
    ---------
    1. Client requests an OTP    → row inserted (is_verified=False).
    2. Client verifies the code  → is_verified=True.
    3. Registration re-matches the code and sets is_verified=True inside
       its own transaction.

    Rows are never deleted on the request path; expiry is logical
    (``expires_at``). ``purge_expired_otps`` can be scheduled externally.
    """

    __tablename__ = "otp_verification"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(String(15), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    otp_code = Column(String(6), nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    expires_at = Column(DateTime(timezone=False), nullable=False, index=True)
    created_at = Column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<OtpVerification(id={self.id}, phone={self.phone!r}, "
            f"expires_at={self.expires_at}, is_verified={self.is_verified})>"
        )
