"""Access and refresh token issuance and verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from ..domain.errors import InvalidToken
from ..domain.models import Account, Role
from ..domain.ports.persistence import AccountRepository

logger = logging.getLogger(__name__)

PLACEHOLDER_SECRETS = frozenset({"change-me", "change-me-access", "change-me-refresh"})


@dataclass(frozen=True, slots=True)
class TokenSettings:
    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    issuer: str = "roomhub-api"
    audience: str = "roomhub-app"
    algorithm: str = "HS256"


@dataclass(frozen=True, slots=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


@dataclass(frozen=True, slots=True)
class AccessClaims:
    account_id: int
    email: str
    role: Role
    is_email_verified: bool


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    account_id: int
    email: str


class TokenService:
    """Signs short-lived access tokens and long-lived refresh tokens with separate keys."""

    def __init__(self, settings: TokenSettings, accounts: AccountRepository) -> None:
        if not settings.access_secret or not settings.refresh_secret:
            raise RuntimeError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must be configured.")
        if settings.access_secret == settings.refresh_secret:
            raise RuntimeError("Access and refresh tokens must be signed with different secrets.")
        if {settings.access_secret, settings.refresh_secret} & PLACEHOLDER_SECRETS:
            logger.warning(
                "JWT secrets are using placeholder values. Configure real secrets in production."
            )
        self._settings = settings
        self._accounts = accounts

    @property
    def settings(self) -> TokenSettings:
        return self._settings

    def issue_pair(self, account: Account) -> TokenPair:
        now = datetime.now(timezone.utc)
        access_payload = {
            "accountId": account.id,
            "email": account.email,
            "role": account.role.value,
            "isEmailVerified": account.is_email_verified,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": now,
            "exp": now + self._settings.access_ttl,
        }
        refresh_payload = {
            "accountId": account.id,
            "email": account.email,
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": now,
            "exp": now + self._settings.refresh_ttl,
        }
        return TokenPair(
            access_token=jwt.encode(
                access_payload, self._settings.access_secret, algorithm=self._settings.algorithm
            ),
            refresh_token=jwt.encode(
                refresh_payload, self._settings.refresh_secret, algorithm=self._settings.algorithm
            ),
            expires_in=int(self._settings.access_ttl.total_seconds()),
        )

    def verify_access(self, token: str) -> AccessClaims:
        payload = self._decode(token, self._settings.access_secret, "Invalid or expired token")
        try:
            return AccessClaims(
                account_id=int(payload["accountId"]),
                email=str(payload["email"]),
                role=Role(payload["role"]),
                is_email_verified=bool(payload["isEmailVerified"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken("Invalid or expired token") from exc

    def verify_refresh(self, token: str) -> RefreshClaims:
        payload = self._decode(token, self._settings.refresh_secret, "Invalid or expired refresh token")
        try:
            return RefreshClaims(account_id=int(payload["accountId"]), email=str(payload["email"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken("Invalid or expired refresh token") from exc

    def refresh(self, refresh_token: str) -> TokenPair:
        """Mint a new pair from the current account record, not the stale refresh payload."""
        claims = self.verify_refresh(refresh_token)
        account = self._accounts.get_account(claims.account_id)
        if account is None:
            raise InvalidToken("Account no longer exists")
        return self.issue_pair(account)

    def _decode(self, token: str, secret: str, message: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self._settings.algorithm],
                audience=self._settings.audience,
                issuer=self._settings.issuer,
                options={"require": ["exp", "iss", "aud"]},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(message) from exc
