"""Pydantic schemas for request/response validation"""
from app.schemas.auth_schemas import (
    SendOtpRequest,
    VerifyOtpRequest,
    RegisterRequest,
    LoginRequest,
    MessageResponse,
    SendOtpResponse,
    RegisteredUser,
    RegisterResponse,
    LoginUser,
    LoginResponse,
    HealthResponse,
    SessionClaims,
)

__all__ = [
    "SendOtpRequest",
    "VerifyOtpRequest",
    "RegisterRequest",
    "LoginRequest",
    "MessageResponse",
    "SendOtpResponse",
    "RegisteredUser",
    "RegisterResponse",
    "LoginUser",
    "LoginResponse",
    "HealthResponse",
    "SessionClaims",
]
