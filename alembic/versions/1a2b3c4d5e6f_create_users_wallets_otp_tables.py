"""create users, wallets and otp_verification tables

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "1a2b3c4d5e6f"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

kyc_status = sa.Enum(
    "NOT_SUBMITTED", "PENDING", "APPROVED", "REJECTED", name="kycstatus"
)


def _money(name: str) -> sa.Column:
    return sa.Column(
        name, sa.Numeric(15, 2), nullable=False, server_default=sa.text("0.00")
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(50), nullable=False),
        sa.Column("username", sa.String(7), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(15), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_phone_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("kyc_status", kyc_status, nullable=False, server_default="NOT_SUBMITTED"),
        sa.Column("referral_code", sa.String(20), nullable=False),
        sa.Column("referred_by_id", sa.Integer(), nullable=True),
        sa.Column("total_referrals", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lock_until", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["referred_by_id"], ["users.id"]),
    )
    for column in ("user_id", "username", "email", "phone_number", "referral_code"):
        op.create_index(f"ix_users_{column}", "users", [column], unique=True)
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_created_at", "users", ["created_at"])

    op.create_table(
        "wallets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        _money("total_balance"),
        _money("available_for_withdrawal"),
        _money("locked_in_orders"),
        _money("total_earnings"),
        _money("total_deposited"),
        _money("total_withdrawn"),
        _money("total_bonus_received"),
        _money("referral_bonus"),
        sa.Column("total_orders", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed_orders", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_transaction_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("total_balance >= 0", name="ck_wallets_total_balance_non_negative"),
        sa.CheckConstraint("available_for_withdrawal >= 0", name="ck_wallets_available_non_negative"),
        sa.CheckConstraint("locked_in_orders >= 0", name="ck_wallets_locked_non_negative"),
    )
    op.create_index("ix_wallets_id", "wallets", ["id"])
    op.create_index("ix_wallets_user_id", "wallets", ["user_id"], unique=True)

    op.create_table(
        "otp_verification",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("phone", sa.String(15), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("otp_code", sa.String(6), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_otp_verification_phone", "otp_verification", ["phone"])
    op.create_index("ix_otp_verification_email", "otp_verification", ["email"])
    op.create_index("ix_otp_verification_expires_at", "otp_verification", ["expires_at"])


def downgrade() -> None:
    op.drop_index("ix_otp_verification_expires_at", table_name="otp_verification")
    op.drop_index("ix_otp_verification_email", table_name="otp_verification")
    op.drop_index("ix_otp_verification_phone", table_name="otp_verification")
    op.drop_table("otp_verification")

    op.drop_index("ix_wallets_user_id", table_name="wallets")
    op.drop_index("ix_wallets_id", table_name="wallets")
    op.drop_table("wallets")

    op.drop_index("ix_users_created_at", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    for column in ("referral_code", "phone_number", "email", "username", "user_id"):
        op.drop_index(f"ix_users_{column}", table_name="users")
    op.drop_table("users")
    kyc_status.drop(op.get_bind(), checkfirst=True)
