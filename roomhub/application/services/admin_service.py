from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ...domain.errors import Forbidden, NotFound
from ...domain.models import Account, Role
from ...domain.ports.delivery import ImageStorage
from ...domain.ports.persistence import AccountRepository
from ...domain.validators import normalize_email
from ...services.account_service import AccountService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
ADMIN_EDITABLE_FIELDS = (
    "name",
    "last_name",
    "email",
    "region",
    "city",
    "phone",
    "role",
    "bio",
    "habits",
    "is_email_verified",
)


@dataclass(slots=True)
class AccountPage:
    items: List[Account]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


class AdminService:
    """Administrative management of marketplace accounts."""

    def __init__(
        self,
        accounts: AccountService,
        repository: AccountRepository,
        images: Optional[ImageStorage] = None,
    ) -> None:
        self._accounts = accounts
        self._repository = repository
        self._images = images

    # ------------------------------------------------------------------
    def ensure_default_admin(
        self,
        email: Optional[str],
        password: Optional[str],
        phone: str = "900000000",
    ) -> Optional[Account]:
        if not email or not password:
            return None
        existing = self._repository.get_account_by_email(normalize_email(email))
        if existing:
            return existing
        logger.info("Creating default administrator account for %s", email)
        return self._accounts.register(
            name="Admin",
            last_name="RoomHub",
            email=email,
            region="Metropolitana",
            city="Santiago",
            phone=phone,
            password=password,
            role=Role.ADMIN,
            verified=True,
            allowed_roles=tuple(Role),
        )

    def list_accounts(
        self,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> AccountPage:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        role_filter = role if role in {r.value for r in Role} else None
        items, total = self._repository.list_accounts(
            offset=(page - 1) * limit,
            limit=limit,
            role=Role(role_filter) if role_filter else None,
            search=(search or "").strip() or None,
        )
        return AccountPage(items=items, total=total, page=page, limit=limit)

    def get_account(self, account_id: int) -> Account:
        return self._accounts.get_account(account_id)

    def create_account(
        self,
        *,
        name: str,
        last_name: str,
        email: str,
        region: str,
        city: str,
        phone: str,
        password: str,
        role: Role,
        bio: str = "",
        habits: str = "",
    ) -> Account:
        # Accounts created by an administrator start out verified.
        account = self._accounts.register(
            name=name,
            last_name=last_name,
            email=email,
            region=region,
            city=city,
            phone=phone,
            password=password,
            role=role,
            bio=bio,
            habits=habits,
            verified=True,
            allowed_roles=tuple(Role),
        )
        logger.info("Administrator created account %s", account.id)
        return account

    def update_account(self, account_id: int, changes: Mapping[str, Any]) -> Account:
        account = self._accounts.get_account(account_id)
        allowed = {name: value for name, value in changes.items() if name in ADMIN_EDITABLE_FIELDS}
        return self._accounts.apply_changes(account, allowed)

    def delete_account(self, actor_id: int, account_id: int) -> None:
        if actor_id == account_id:
            raise Forbidden("You cannot delete your own account")
        account = self._accounts.get_account(account_id)
        if not self._repository.delete_account(account_id):
            raise NotFound()
        logger.info("Administrator %s deleted account %s", actor_id, account_id)
        if account.profile_photo and self._images is not None:
            self._images.delete(account.profile_photo)

    def stats(self) -> Dict[str, Any]:
        total = self._repository.count_accounts()
        verified = self._repository.count_accounts(is_email_verified=True)
        return {
            "total_users": total,
            "users_by_role": {role.value: self._repository.count_accounts(role=role) for role in Role},
            "verified_users": verified,
            "unverified_users": total - verified,
        }
