"""Account domain model for marketplace users."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    SEEKER = "seeker"
    HOST = "host"


class CodePurpose(str, Enum):
    """Slot a one-time code is stored in."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


@dataclass(frozen=True, slots=True)
class PendingCode:
    """Hashed one-time code together with its expiry."""

    purpose: CodePurpose
    code_hash: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(slots=True)
class Account:
    """
    Registered marketplace user.

    Attributes:
        id: Identifier assigned by the store
        email: Lowercase email address (unique)
        phone: Canonical phone number, e.g. +56987654321 (unique)
        password_hash: bcrypt hash of the password
        role: One of admin, seeker or host
        is_email_verified: Whether the email address was confirmed
        email_verification: Pending email verification code, if any
        password_reset: Pending password reset code, if any
    """

    id: int
    name: str
    last_name: str
    email: str
    region: str
    city: str
    phone: str
    password_hash: str
    role: Role = Role.SEEKER
    bio: str = ""
    habits: str = ""
    profile_photo: str = ""
    is_email_verified: bool = False
    email_verification: Optional[PendingCode] = None
    password_reset: Optional[PendingCode] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def pending_code(self, purpose: CodePurpose) -> Optional[PendingCode]:
        if purpose is CodePurpose.EMAIL_VERIFICATION:
            return self.email_verification
        return self.password_reset

    def __repr__(self) -> str:
        return (
            f"<Account id={self.id} email={self.email} role={self.role.value} "
            f"verified={self.is_email_verified}>"
        )
