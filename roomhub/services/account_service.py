"""Account lifecycle: registration, email verification, login and password changes."""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..domain.errors import (
    AlreadyVerified,
    DuplicateEmail,
    DuplicatePhone,
    InvalidCredentials,
    InvalidOrExpiredCode,
    NotFound,
    PasswordReused,
    ValidationError,
)
from ..domain.models import Account, CodePurpose, Role
from ..domain.ports.persistence import AccountRepository
from ..domain.validators import (
    normalize_email,
    require_fields,
    validate_email,
    validate_password_strength,
    validate_profile_fields,
)
from .one_time_codes import OneTimeCodeEngine
from .password_hasher import CredentialHasher
from .phone_normalizer import PhoneNormalizer

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = (Role.SEEKER, Role.HOST)
REGISTRATION_FIELDS = ("name", "last_name", "email", "region", "city", "phone", "password")
PROFILE_FIELDS = ("name", "last_name", "region", "city", "phone", "bio", "habits")


class AccountService:
    """Service for managing account credentials and verification state."""

    def __init__(
        self,
        repository: AccountRepository,
        hasher: CredentialHasher,
        codes: OneTimeCodeEngine,
        phone: PhoneNormalizer,
    ) -> None:
        self.repository = repository
        self.hasher = hasher
        self.codes = codes
        self.phone = phone

    # Registration -----------------------------------------------------------
    def register(
        self,
        *,
        name: str,
        last_name: str,
        email: str,
        region: str,
        city: str,
        phone: str,
        password: str,
        role: Role = Role.SEEKER,
        bio: str = "",
        habits: str = "",
        verified: bool = False,
        allowed_roles: Iterable[Role] = SELF_SERVICE_ROLES,
    ) -> Account:
        """
        Create a new account.

        Args:
            verified: Create the account with its email already verified
            allowed_roles: Roles the caller may assign

        Returns:
            The stored Account

        Raises:
            ValidationError: If a field is missing or malformed
            WeakPassword: If the password fails the strength policy
            InvalidPhone: If the phone number has the wrong shape
            DuplicateEmail: If the email is already registered
            DuplicatePhone: If the phone number is already registered
        """
        require_fields(
            {
                "name": name,
                "last_name": last_name,
                "email": email,
                "region": region,
                "city": city,
                "phone": phone,
                "password": password,
            },
            REGISTRATION_FIELDS,
        )
        normalized_email = validate_email(email)
        validate_password_strength(password)
        canonical_phone = self.phone.to_storage(phone)
        role = self._coerce_role(role, allowed_roles)
        profile = validate_profile_fields(
            {"name": name, "last_name": last_name, "region": region, "city": city, "bio": bio, "habits": habits}
        )

        # The store's unique constraints are authoritative; these only give early errors.
        if self.repository.get_account_by_email(normalized_email):
            raise DuplicateEmail()
        if self.repository.get_account_by_phone(canonical_phone):
            raise DuplicatePhone()

        account = self.repository.create_account(
            email=normalized_email,
            phone=canonical_phone,
            password_hash=self.hasher.hash(password),
            role=role,
            is_email_verified=verified,
            **profile,
        )
        logger.info("Registered account %s with role %s", account.id, account.role.value)
        return account

    # Email verification -----------------------------------------------------
    def request_email_verification(self, account: Account) -> str:
        """Issue a new verification code, invalidating any previous one."""
        if account.is_email_verified:
            raise AlreadyVerified()
        return self.codes.issue(account, CodePurpose.EMAIL_VERIFICATION)

    def confirm_email_verification(self, account: Account, code: str) -> Account:
        """
        Redeem a verification code and mark the email verified.

        Raises:
            AlreadyVerified: If the account is verified but still holds a code; the code is left alone
            InvalidOrExpiredCode: If the code is wrong, expired or already consumed
        """
        if account.is_email_verified:
            if account.email_verification is not None:
                raise AlreadyVerified()
            raise InvalidOrExpiredCode()
        if not self.codes.redeem(account, CodePurpose.EMAIL_VERIFICATION, code, is_email_verified=True):
            raise InvalidOrExpiredCode()
        logger.info("Verified email for account %s", account.id)
        return self.get_account(account.id)

    # Credentials ------------------------------------------------------------
    def authenticate(self, email: str, password: str) -> Account:
        """
        Authenticate with email and password.

        Raises:
            InvalidCredentials: Same error whether the account is missing or the password is wrong
        """
        account = self.repository.get_account_by_email(normalize_email(email))
        if account is None:
            self.hasher.compare_dummy(password or "")
            raise InvalidCredentials()
        if not self.hasher.compare(password or "", account.password_hash):
            raise InvalidCredentials()
        return account

    def change_password(self, account: Account, current_password: str, new_password: str) -> None:
        if not self.hasher.compare(current_password or "", account.password_hash):
            raise InvalidCredentials("Current password is incorrect")
        if current_password == new_password:
            raise PasswordReused()
        validate_password_strength(new_password)
        self.repository.update_account(account.id, password_hash=self.hasher.hash(new_password))
        logger.info("Password changed for account %s", account.id)

    def request_password_reset(self, email: str) -> Optional[Tuple[Account, str]]:
        """
        Issue a reset code for ``email``.

        Returns:
            Tuple of (Account, plaintext_code), or None if no account uses this email
        """
        account = self.repository.get_account_by_email(normalize_email(email))
        if account is None:
            return None
        return account, self.codes.issue(account, CodePurpose.PASSWORD_RESET)

    def confirm_password_reset(self, email: str, code: str, new_password: str) -> Account:
        validate_password_strength(new_password)
        account = self.repository.get_account_by_email(normalize_email(email))
        if account is None:
            raise InvalidOrExpiredCode()
        new_hash = self.hasher.hash(new_password)
        if not self.codes.redeem(account, CodePurpose.PASSWORD_RESET, code, password_hash=new_hash):
            raise InvalidOrExpiredCode()
        logger.info("Password reset completed for account %s", account.id)
        return self.get_account(account.id)

    # Lookup -----------------------------------------------------------------
    def get_account(self, account_id: int) -> Account:
        account = self.repository.get_account(account_id)
        if account is None:
            raise NotFound()
        return account

    def get_by_email(self, email: str) -> Account:
        account = self.repository.get_account_by_email(normalize_email(email))
        if account is None:
            raise NotFound()
        return account

    # Profile ----------------------------------------------------------------
    def update_profile(self, account: Account, changes: Mapping[str, Any]) -> Account:
        """Apply self-service profile changes; email, role and password are ignored."""
        allowed = {name: value for name, value in changes.items() if name in PROFILE_FIELDS}
        return self.apply_changes(account, allowed)

    def apply_changes(self, account: Account, changes: Mapping[str, Any]) -> Account:
        """Validate and store field changes, checking email and phone uniqueness."""
        fields: Dict[str, Any] = validate_profile_fields(dict(changes))

        if "phone" in changes:
            canonical_phone = self.phone.to_storage(changes["phone"] or "")
            if canonical_phone != account.phone:
                existing = self.repository.get_account_by_phone(canonical_phone)
                if existing and existing.id != account.id:
                    raise DuplicatePhone()
            fields["phone"] = canonical_phone

        if "email" in changes:
            new_email = validate_email(changes["email"] or "")
            if new_email != account.email:
                existing = self.repository.get_account_by_email(new_email)
                if existing and existing.id != account.id:
                    raise DuplicateEmail()
            fields["email"] = new_email

        if "role" in changes:
            fields["role"] = self._coerce_role(changes["role"], tuple(Role))

        if "is_email_verified" in changes:
            fields["is_email_verified"] = bool(changes["is_email_verified"])

        if not fields:
            return account
        updated = self.repository.update_account(account.id, **fields)
        # Verified accounts hold no verification code.
        if fields.get("is_email_verified") and updated.email_verification is not None:
            self.repository.clear_pending_code(account.id, CodePurpose.EMAIL_VERIFICATION)
            updated = self.get_account(account.id)
        return updated

    def set_profile_photo(self, account: Account, url: str) -> Account:
        return self.repository.update_account(account.id, profile_photo=url)

    def clear_profile_photo(self, account: Account) -> Account:
        return self.repository.update_account(account.id, profile_photo="")

    @staticmethod
    def _coerce_role(role: Any, allowed_roles: Iterable[Role]) -> Role:
        try:
            value = Role(role)
        except ValueError as exc:
            raise ValidationError(
                "Invalid role",
                details=[{"field": "role", "error": "INVALID_CHOICE"}],
            ) from exc
        if value not in tuple(allowed_roles):
            raise ValidationError(
                f"Role '{value.value}' cannot be assigned here",
                details=[{"field": "role", "error": "NOT_ALLOWED"}],
            )
        return value
