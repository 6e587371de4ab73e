"""Wallet database model."""
from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base

ZERO = Decimal("0.00")


class Wallet(Base):
    """One wallet per user, created together with the user row.

    Only the balance columns that registration touches are written here;
    the remaining counters keep their zero defaults.
    """
    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint("total_balance >= 0", name="ck_wallets_total_balance_non_negative"),
        CheckConstraint("available_for_withdrawal >= 0", name="ck_wallets_available_non_negative"),
        CheckConstraint("locked_in_orders >= 0", name="ck_wallets_locked_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    total_balance = Column(Numeric(15, 2), nullable=False, default=ZERO)
    available_for_withdrawal = Column(Numeric(15, 2), nullable=False, default=ZERO)
    locked_in_orders = Column(Numeric(15, 2), nullable=False, default=ZERO)

    total_earnings = Column(Numeric(15, 2), nullable=False, default=ZERO)
    total_deposited = Column(Numeric(15, 2), nullable=False, default=ZERO)
    total_withdrawn = Column(Numeric(15, 2), nullable=False, default=ZERO)

    total_bonus_received = Column(Numeric(15, 2), nullable=False, default=ZERO)
    referral_bonus = Column(Numeric(15, 2), nullable=False, default=ZERO)

    total_orders = Column(Integer, nullable=False, default=0)
    completed_orders = Column(Integer, nullable=False, default=0)

    last_transaction_at = Column(DateTime(timezone=False), nullable=True)
    created_at = Column(DateTime(timezone=False), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=False), onupdate=func.now(), nullable=True)

    user = relationship("User", back_populates="wallet")

    def __repr__(self):
        return (
            f"<Wallet(id={self.id}, user_id={self.user_id}, "
            f"total_balance={self.total_balance})>"
        )
