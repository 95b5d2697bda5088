from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..models import Account, CodePurpose, Role


class AccountRepository(Protocol):
    """Abstract storage for accounts, keyed by id with unique email and phone."""

    def create_account(
        self,
        *,
        name: str,
        last_name: str,
        email: str,
        region: str,
        city: str,
        phone: str,
        password_hash: str,
        role: Role,
        is_email_verified: bool,
        bio: str = "",
        habits: str = "",
    ) -> Account:
        ...

    def get_account(self, account_id: int) -> Optional[Account]:
        ...

    def get_account_by_email(self, email: str) -> Optional[Account]:
        ...

    def get_account_by_phone(self, phone: str) -> Optional[Account]:
        ...

    def update_account(self, account_id: int, **fields: Any) -> Account:
        ...

    def delete_account(self, account_id: int) -> bool:
        ...

    def set_pending_code(
        self,
        account_id: int,
        purpose: CodePurpose,
        code_hash: str,
        expires_at: datetime,
    ) -> None:
        ...

    def clear_pending_code(
        self,
        account_id: int,
        purpose: CodePurpose,
        expected_hash: Optional[str] = None,
    ) -> bool:
        ...

    def consume_pending_code(
        self,
        account_id: int,
        purpose: CodePurpose,
        expected_hash: str,
        changes: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Clear the code and apply ``changes`` only if the stored hash is still ``expected_hash``."""
        ...

    def list_accounts(
        self,
        *,
        offset: int,
        limit: int,
        role: Optional[Role] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Account], int]:
        ...

    def count_accounts(
        self,
        *,
        role: Optional[Role] = None,
        is_email_verified: Optional[bool] = None,
    ) -> int:
        ...
