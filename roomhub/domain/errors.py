"""Error taxonomy for account operations.

Every error carries a machine-readable code, a human-readable message and the
HTTP status the API layer maps it to.
"""

from typing import Any, Dict, List, Optional


class AccountError(Exception):
    """Base class for errors raised by the account services."""

    code = "ACCOUNT_ERROR"
    status_code = 400
    default_message = "Account operation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AccountError):
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class WeakPassword(ValidationError):
    code = "WEAK_PASSWORD"
    default_message = "Password does not meet the strength policy"


class InvalidPhone(ValidationError):
    code = "INVALID_PHONE"
    default_message = "Phone number must have 9 digits and start with 9 (e.g. 987654321)"


class DuplicateEmail(AccountError):
    code = "DUPLICATE_EMAIL"
    status_code = 409
    default_message = "Email is already registered"


class DuplicatePhone(AccountError):
    code = "DUPLICATE_PHONE"
    status_code = 409
    default_message = "Phone number is already registered"


class NotFound(AccountError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Account not found"


class InvalidCredentials(AccountError):
    """Raised for both unknown accounts and wrong passwords."""

    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid credentials"


class InvalidOrExpiredCode(AccountError):
    code = "INVALID_OR_EXPIRED_CODE"
    default_message = "Invalid or expired code"


class AlreadyVerified(AccountError):
    code = "ALREADY_VERIFIED"
    default_message = "Email is already verified"


class PasswordReused(AccountError):
    code = "PASSWORD_REUSED"
    default_message = "New password must be different from the current one"


class InvalidToken(AccountError):
    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Invalid or expired token"


class Forbidden(AccountError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "You do not have permission to access this resource"


class UploadError(AccountError):
    code = "UPLOAD_ERROR"
    default_message = "Could not process the uploaded file"


class DeliveryFailed(AccountError):
    code = "DELIVERY_FAILED"
    status_code = 500
    default_message = "Could not send the email. Please try again."


class InternalError(AccountError):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"
