from typing import Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.dependencies import get_account_service, get_token_service
from ...domain.errors import Forbidden, InvalidToken
from ...domain.models import Account, Role
from ...services.account_service import AccountService
from ...services.token_service import AccessClaims, TokenService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_access_claims(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> AccessClaims:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidToken("Access token required")
    return token_service.verify_access(credentials.credentials)


def get_current_account(
    claims: AccessClaims = Depends(get_access_claims),
    account_service: AccountService = Depends(get_account_service),
) -> Account:
    account = account_service.repository.get_account(claims.account_id)
    if account is None:
        raise InvalidToken("Account no longer exists")
    return account


def require_verified_email(claims: AccessClaims = Depends(get_access_claims)) -> AccessClaims:
    if not claims.is_email_verified:
        raise Forbidden(
            "Email not verified. Please verify your email before continuing.",
            details=[{"requires_email_verification": True}],
        )
    return claims


def require_role(*roles: Role) -> Callable[..., AccessClaims]:
    def dependency(claims: AccessClaims = Depends(get_access_claims)) -> AccessClaims:
        if claims.role not in roles:
            raise Forbidden(
                details=[{"required_roles": [role.value for role in roles], "user_role": claims.role.value}]
            )
        return claims

    return dependency


require_admin = require_role(Role.ADMIN)
