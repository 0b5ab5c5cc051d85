import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from auth_api.models.auth import Role


class OtpMethod(str, enum.Enum):
    email_activation = "email-activation"
    phone_activation = "phone-activation"
    email_recovery = "email-recovery"


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    phone_number: Optional[str] = None
    password: str
    confirm_password: str


class ActivateRequest(BaseModel):
    email: Optional[EmailStr] = None
    verification_otp: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class GoogleSignInRequest(BaseModel):
    google_id: str = Field(min_length=1)
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None


class RecoveryRequest(BaseModel):
    email: EmailStr


class RecoveryVerifyRequest(BaseModel):
    email: Optional[EmailStr] = None
    recovery_otp: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    password: str
    confirm_password: str


class ResendOtpRequest(BaseModel):
    method: OtpMethod
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


class AuthResponse(BaseModel):
    """Public view of an Auth record; never includes the hash or OTPs."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    google_id: Optional[str] = None
    role: Role
    is_verified: bool
    is_blocked: bool
    created_at: Optional[datetime] = None
