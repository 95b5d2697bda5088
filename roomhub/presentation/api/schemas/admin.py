from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr

from ....domain.models import Role
from .accounts import AccountResponse


class AdminCreateUserRequest(BaseModel):
    name: str
    last_name: str
    email: EmailStr
    region: str
    city: str
    phone: str
    password: str
    role: Role
    bio: str = ""
    habits: str = ""


class AdminUpdateUserRequest(BaseModel):
    name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    region: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None
    bio: Optional[str] = None
    habits: Optional[str] = None
    is_email_verified: Optional[bool] = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_users: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class AccountListResponse(BaseModel):
    success: bool = True
    users: List[AccountResponse]
    pagination: Pagination


class UserStats(BaseModel):
    total_users: int
    users_by_role: Dict[str, int]
    verified_users: int
    unverified_users: int


class StatsResponse(BaseModel):
    success: bool = True
    stats: UserStats


class AdminAccountResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: AccountResponse
