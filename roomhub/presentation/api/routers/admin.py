from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ....application.services.admin_service import DEFAULT_PAGE_SIZE, AdminService
from ....core.dependencies import get_admin_service, get_phone_normalizer
from ....services.phone_normalizer import PhoneNormalizer
from ....services.token_service import AccessClaims
from ..dependencies import require_admin
from ..schemas.accounts import AccountResponse, MessageResponse
from ..schemas.admin import (
    AccountListResponse,
    AdminAccountResponse,
    AdminCreateUserRequest,
    AdminUpdateUserRequest,
    Pagination,
    StatsResponse,
    UserStats,
)

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@router.get("", response_model=AccountListResponse)
def list_users(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    _: AccessClaims = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountListResponse:
    result = admin.list_accounts(page=page, limit=limit, role=role, search=search)
    return AccountListResponse(
        users=[AccountResponse.from_account(account, phone) for account in result.items],
        pagination=Pagination(
            current_page=result.page,
            total_pages=result.total_pages,
            total_users=result.total,
            limit=result.limit,
            has_next_page=result.has_next_page,
            has_prev_page=result.has_prev_page,
        ),
    )


# Declared before "/{account_id}" so "stats" is not parsed as an id.
@router.get("/stats", response_model=StatsResponse)
def user_stats(
    _: AccessClaims = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
) -> StatsResponse:
    return StatsResponse(stats=UserStats(**admin.stats()))


@router.get("/{account_id}", response_model=AdminAccountResponse)
def get_user(
    account_id: int,
    _: AccessClaims = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AdminAccountResponse:
    account = admin.get_account(account_id)
    return AdminAccountResponse(user=AccountResponse.from_account(account, phone))


@router.post("", response_model=AdminAccountResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    request: AdminCreateUserRequest,
    _: AccessClaims = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AdminAccountResponse:
    account = admin.create_account(**request.model_dump())
    return AdminAccountResponse(
        message="User created successfully",
        user=AccountResponse.from_account(account, phone),
    )


@router.put("/{account_id}", response_model=AdminAccountResponse)
def update_user(
    account_id: int,
    request: AdminUpdateUserRequest,
    _: AccessClaims = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AdminAccountResponse:
    account = admin.update_account(account_id, request.model_dump(exclude_unset=True))
    return AdminAccountResponse(
        message="User updated successfully",
        user=AccountResponse.from_account(account, phone),
    )


@router.delete("/{account_id}", response_model=MessageResponse)
def delete_user(
    account_id: int,
    claims: AccessClaims = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
) -> MessageResponse:
    admin.delete_account(claims.account_id, account_id)
    return MessageResponse(message="User deleted successfully")
