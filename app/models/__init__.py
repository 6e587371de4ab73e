"""Database models"""
from app.models.user import User, KycStatus
from app.models.wallet import Wallet
from app.models.otp import OtpVerification

__all__ = ["User", "KycStatus", "Wallet", "OtpVerification"]
