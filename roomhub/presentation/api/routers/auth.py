"""API router for registration, login and credential recovery."""

import logging

from fastapi import APIRouter, Depends, status

from ....core.dependencies import (
    get_account_service,
    get_email_service,
    get_phone_normalizer,
    get_token_service,
)
from ....domain.errors import DeliveryFailed
from ....domain.models import Account, CodePurpose
from ....domain.ports.delivery import CodeDelivery
from ....services.account_service import AccountService
from ....services.phone_normalizer import PhoneNormalizer
from ....services.token_service import TokenPair, TokenService
from ..dependencies import get_current_account
from ..schemas.accounts import AccountResponse, MessageResponse
from ..schemas.auth import (
    AccountEnvelope,
    ChangePasswordRequest,
    EmailRequest,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
    VerifyEmailRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If the email exists in our system, you will receive a reset code"


def _tokens(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_in=pair.expires_in,
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
    email_service: CodeDelivery = Depends(get_email_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> RegisterResponse:
    """Register a new account and email it a verification code."""
    account = accounts.register(
        name=request.name,
        last_name=request.last_name,
        email=request.email,
        region=request.region,
        city=request.city,
        phone=request.phone,
        password=request.password,
        role=request.role,
    )

    code = accounts.request_email_verification(account)
    email_sent = email_service.send_code(account.email, account.name, code, CodePurpose.EMAIL_VERIFICATION)
    if not email_sent:
        # Registration still succeeds; the user can ask for a new code.
        logger.error("Could not send verification email for account %s", account.id)

    account = accounts.get_account(account.id)
    return RegisterResponse(
        message="Registration successful. Check your email for the verification code.",
        user=AccountResponse.from_account(account, phone),
        email_sent=email_sent,
    )


@router.post("/verify-email", response_model=AccountEnvelope)
def verify_email(
    request: VerifyEmailRequest,
    accounts: AccountService = Depends(get_account_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountEnvelope:
    account = accounts.get_by_email(request.email)
    account = accounts.confirm_email_verification(account, request.code)
    return AccountEnvelope(
        message="Email verified successfully",
        user=AccountResponse.from_account(account, phone),
    )


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    request: EmailRequest,
    accounts: AccountService = Depends(get_account_service),
    email_service: CodeDelivery = Depends(get_email_service),
) -> MessageResponse:
    account = accounts.get_by_email(request.email)
    code = accounts.request_email_verification(account)
    if not email_service.send_code(
        account.email, account.name, code, CodePurpose.EMAIL_VERIFICATION, resend=True
    ):
        raise DeliveryFailed()
    return MessageResponse(message="Verification code sent")


@router.post("/login", response_model=LoginResponse)
def login(
    request: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
    tokens: TokenService = Depends(get_token_service),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> LoginResponse:
    """Login and get an access/refresh token pair."""
    account = accounts.authenticate(request.email, request.password)
    pair = tokens.issue_pair(account)
    return LoginResponse(
        message="Login successful",
        user=AccountResponse.from_account(account, phone),
        tokens=_tokens(pair),
        requires_email_verification=not account.is_email_verified,
    )


@router.post("/refresh-token", response_model=RefreshTokenResponse)
def refresh_token(
    request: RefreshTokenRequest,
    tokens: TokenService = Depends(get_token_service),
) -> RefreshTokenResponse:
    pair = tokens.refresh(request.refresh_token)
    return RefreshTokenResponse(message="Tokens renewed", tokens=_tokens(pair))


@router.post("/logout", response_model=MessageResponse)
def logout(_: Account = Depends(get_current_account)) -> MessageResponse:
    # Tokens are not tracked server-side; the client discards them.
    return MessageResponse(message="Logged out. Please delete your stored tokens.")


@router.get("/me", response_model=AccountEnvelope)
def me(
    account: Account = Depends(get_current_account),
    phone: PhoneNormalizer = Depends(get_phone_normalizer),
) -> AccountEnvelope:
    return AccountEnvelope(message="Current user", user=AccountResponse.from_account(account, phone))


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.change_password(account, request.current_password, request.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    request: EmailRequest,
    accounts: AccountService = Depends(get_account_service),
    email_service: CodeDelivery = Depends(get_email_service),
) -> MessageResponse:
    """Always reports success so the response does not reveal which emails exist."""
    issued = accounts.request_password_reset(request.email)
    if issued is not None:
        account, code = issued
        if not email_service.send_code(account.email, account.name, code, CodePurpose.PASSWORD_RESET):
            logger.error("Could not send password reset email for account %s", account.id)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    request: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.confirm_password_reset(request.email, request.code, request.new_password)
    return MessageResponse(message="Password reset successfully")
