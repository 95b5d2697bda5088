"""Account representations shared by the API routers."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ....domain.models import Account, Role
from ....services.phone_normalizer import PhoneNormalizer


class AccountResponse(BaseModel):
    """Account as seen by its owner or an administrator. Never carries hashes."""

    id: int
    name: str
    last_name: str
    email: str
    region: str
    city: str
    phone: str
    bio: str
    habits: str
    profile_photo: str
    role: Role
    is_email_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Account, phone: PhoneNormalizer) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            last_name=account.last_name,
            email=account.email,
            region=account.region,
            city=account.city,
            phone=phone.to_display(account.phone),
            bio=account.bio,
            habits=account.habits,
            profile_photo=account.profile_photo,
            role=account.role,
            is_email_verified=account.is_email_verified,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class PublicProfileResponse(BaseModel):
    """Account as seen by other marketplace users."""

    id: int
    name: str
    last_name: str
    region: str
    city: str
    bio: str
    habits: str
    profile_photo: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "PublicProfileResponse":
        return cls(
            id=account.id,
            name=account.name,
            last_name=account.last_name,
            region=account.region,
            city=account.city,
            bio=account.bio,
            habits=account.habits,
            profile_photo=account.profile_photo,
            role=account.role,
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str
