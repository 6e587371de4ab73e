"""OTP, registration and login schemas

Wire keys are camelCase (``userId``, ``referralCode``); Python attributes
stay snake_case. Request fields are all optional here so the services can
report missing fields with their own messages.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialised with camelCase aliases"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── requests ──────────────────────────────────────────────────────────────────

class SendOtpRequest(CamelModel):
    """Request an OTP for a phone/email pair"""
    phone: Optional[str] = None
    email: Optional[str] = None


class VerifyOtpRequest(CamelModel):
    """Pre-flight OTP check"""
    phone: Optional[str] = None
    otp: Optional[str] = None


class RegisterRequest(CamelModel):
    """Full registration payload"""
    phone: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    otp: Optional[str] = None
    referral_code: Optional[str] = None


class LoginRequest(CamelModel):
    """Login with phone or email"""
    phone: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


# ── responses ─────────────────────────────────────────────────────────────────

class MessageResponse(CamelModel):
    success: bool = True
    message: str


class SendOtpResponse(MessageResponse):
    """``otp`` is only filled on the diagnostics path"""
    otp: Optional[str] = None


class RegisteredUser(CamelModel):
    """Public projection returned after registration"""
    id: int
    user_id: str
    username: str
    phone: str
    email: str
    referral_code: str

    @classmethod
    def from_user(cls, user) -> "RegisteredUser":
        return cls(
            id=user.id,
            user_id=user.user_id,
            username=user.username,
            phone=user.phone_number,
            email=user.email,
            referral_code=user.referral_code,
        )


class RegisterResponse(CamelModel):
    success: bool = True
    message: str = "Registration successful"
    token: str
    user: RegisteredUser


class LoginUser(RegisteredUser):
    """Projection returned after login, with wallet totals"""
    full_name: str
    total_balance: float = 0.0
    available_for_withdrawal: float = 0.0
    is_email_verified: bool
    is_phone_verified: bool
    kyc_status: str

    @classmethod
    def from_user(cls, user) -> "LoginUser":
        wallet = user.wallet
        return cls(
            id=user.id,
            user_id=user.user_id,
            username=user.username,
            full_name=user.full_name,
            phone=user.phone_number,
            email=user.email,
            referral_code=user.referral_code,
            total_balance=float(wallet.total_balance) if wallet else 0.0,
            available_for_withdrawal=float(wallet.available_for_withdrawal) if wallet else 0.0,
            is_email_verified=user.is_email_verified,
            is_phone_verified=user.is_phone_verified,
            kyc_status=user.kyc_status.value,
        )


class LoginResponse(CamelModel):
    success: bool = True
    token: str
    user: LoginUser


class HealthResponse(BaseModel):
    status: str
    database: str


class SessionClaims(BaseModel):
    """Claims carried by a session token"""
    id: int
    user_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
