"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, EmailStr

from ....domain.models import Role
from .accounts import AccountResponse


class RegisterRequest(BaseModel):
    """Request schema for self-registration."""

    name: str
    last_name: str
    email: EmailStr
    region: str
    city: str
    phone: str
    password: str
    role: Role = Role.SEEKER


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    user: AccountResponse
    email_sent: bool


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str


class EmailRequest(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    user: AccountResponse
    tokens: TokenResponse
    requires_email_verification: bool


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class RefreshTokenResponse(BaseModel):
    success: bool = True
    message: str
    tokens: TokenResponse


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str
    new_password: str


class AccountEnvelope(BaseModel):
    success: bool = True
    message: str
    user: AccountResponse
