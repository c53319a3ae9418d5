"""Auth Schemas - registration, login, admin login and KYC review.

Invariants:
    - email is stripped and lower-cased before it reaches the service layer
    - admin is not a self-service user_type
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator

from qipad.schemas.base import CamelModel

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(CamelModel):
    email: str = Field(max_length=255, pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=30)
    user_type: Literal["business_owner", "investor", "individual"] = "individual"

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


class LoginRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


class AdminLoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)


class UserResponse(CamelModel):
    """Public user record; never includes the password hash."""
    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    user_type: str
    is_verified: bool
    is_kyc_complete: bool
    kyc_status: str
    status: str
    created_at: datetime


class AuthResponse(CamelModel):
    token: str
    user: UserResponse


class AdminUser(CamelModel):
    id: str = "admin"
    username: str
    is_admin: bool = True


class AdminAuthResponse(CamelModel):
    message: str = "Admin login successful"
    token: str
    user: AdminUser


class KycUpdateRequest(CamelModel):
    kyc_status: Literal["pending", "verified", "rejected"]


class KycUpdateResponse(CamelModel):
    message: str = "KYC status updated successfully"
    user: UserResponse
    bonus_credited: float = 0
