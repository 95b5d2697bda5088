"""Pydantic schemas for self-service profile endpoints."""

from typing import Optional

from pydantic import BaseModel

from .accounts import PublicProfileResponse


class ProfileUpdateRequest(BaseModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = None
    last_name: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    habits: Optional[str] = None


class ProfileEnvelope(BaseModel):
    success: bool = True
    user: PublicProfileResponse
