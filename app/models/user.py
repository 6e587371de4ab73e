"""User model for wallet app accounts"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum
from app.db.base import Base


class KycStatus(str, Enum):
    """KYC status enumeration (stored only, never changed by registration)"""
    NOT_SUBMITTED = "NOT_SUBMITTED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class User(Base):
    """
    Registered wallet app user.

    ``id`` is the internal key; ``user_id``, ``username`` and ``referral_code``
    are generated public identifiers, each unique.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String(50), unique=True, nullable=False, index=True)
    username = Column(String(7), unique=True, nullable=False, index=True)

    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone_number = Column(String(15), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    is_email_verified = Column(Boolean, default=False, nullable=False)
    is_phone_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    kyc_status = Column(
        SQLEnum(KycStatus, name="kycstatus"),
        nullable=False,
        default=KycStatus.NOT_SUBMITTED,
    )

    referral_code = Column(String(20), unique=True, nullable=False, index=True)
    referred_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    total_referrals = Column(Integer, default=0, nullable=False)

    last_login_at = Column(DateTime(timezone=False), nullable=True)
    login_attempts = Column(Integer, default=0, nullable=False)
    lock_until = Column(DateTime(timezone=False), nullable=True)

    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=False), onupdate=func.now(), nullable=True)

    wallet = relationship(
        "Wallet",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User(id={self.id}, user_id='{self.user_id}', username='{self.username}')>"

    def is_locked(self, now) -> bool:
        return self.lock_until is not None and self.lock_until > now
