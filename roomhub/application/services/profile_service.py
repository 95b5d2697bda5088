import logging
from typing import Any, Mapping

from ...domain.errors import UploadError
from ...domain.models import Account
from ...domain.ports.delivery import ImageStorage
from ...services.account_service import AccountService

logger = logging.getLogger(__name__)

ALLOWED_PHOTO_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})
DEFAULT_MAX_PHOTO_BYTES = 5 * 1024 * 1024


class ProfileService:
    """Self-service profile edits and profile photo management."""

    def __init__(
        self,
        accounts: AccountService,
        image_storage: ImageStorage,
        max_photo_bytes: int = DEFAULT_MAX_PHOTO_BYTES,
    ) -> None:
        self._accounts = accounts
        self._images = image_storage
        self._max_photo_bytes = max_photo_bytes

    def get_profile(self, account_id: int) -> Account:
        return self._accounts.get_account(account_id)

    def update_profile(self, account: Account, changes: Mapping[str, Any]) -> Account:
        return self._accounts.update_profile(account, changes)

    def validate_photo(self, content: bytes, content_type: str) -> None:
        if (content_type or "").lower() not in ALLOWED_PHOTO_TYPES:
            raise UploadError("Invalid file format. Only JPG, PNG and WebP are allowed")
        if not content:
            raise UploadError("The uploaded file is empty")
        if len(content) > self._max_photo_bytes:
            raise UploadError(
                f"File is too large. Maximum size: {self._max_photo_bytes // (1024 * 1024)}MB"
            )

    def upload_photo(self, account: Account, content: bytes, content_type: str) -> Account:
        self.validate_photo(content, content_type)
        previous = account.profile_photo
        url = self._images.store(content, account.id)
        updated = self._accounts.set_profile_photo(account, url)
        if previous:
            self._images.delete(previous)
        logger.info("Updated profile photo for account %s", account.id)
        return updated

    def remove_photo(self, account: Account) -> Account:
        if not account.profile_photo:
            return account
        updated = self._accounts.clear_profile_photo(account)
        self._images.delete(account.profile_photo)
        return updated
