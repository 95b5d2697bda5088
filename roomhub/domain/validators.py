"""Input validation shared by registration, profile and password flows."""

import re
from typing import Any, Dict, Iterable, List, Mapping

import email_validator

from .errors import ValidationError, WeakPassword

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 500
HABITS_MAX_LENGTH = 1000


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> str:
    """Return the normalized email or raise ValidationError."""
    try:
        result = email_validator.validate_email(normalize_email(email), check_deliverability=False)
    except email_validator.EmailNotValidError as exc:
        raise ValidationError(
            "Invalid email format",
            details=[{"field": "email", "error": "INVALID_FORMAT"}],
        ) from exc
    return normalize_email(result.normalized)


def validate_password_strength(password: str) -> None:
    """
    Enforce the password policy.

    Raises:
        WeakPassword: With a reason describing the first failed rule
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise WeakPassword(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise WeakPassword(f"Password cannot be longer than {PASSWORD_MAX_LENGTH} characters")
    if not (
        re.search(r"[a-z]", password)
        and re.search(r"[A-Z]", password)
        and re.search(r"[0-9]", password)
    ):
        raise WeakPassword(
            "Password must contain at least one lowercase letter, one uppercase letter and one number"
        )


def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """Raise ValidationError listing every missing or blank field."""
    missing = [
        name
        for name in fields
        if data.get(name) is None or (isinstance(data.get(name), str) and not data[name].strip())
    ]
    if missing:
        raise ValidationError(
            "Missing required fields",
            details=[{"field": name, "error": "REQUIRED"} for name in missing],
        )


def validate_profile_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Trim text fields and check their length limits.

    Returns a new dict; fields not present in ``changes`` are left out.
    """
    cleaned: Dict[str, Any] = {}
    errors: List[Dict[str, str]] = []

    for name in ("name", "last_name"):
        if name in changes:
            value = (changes[name] or "").strip()
            if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
                errors.append({"field": name, "error": "LENGTH"})
            cleaned[name] = value

    for name in ("region", "city"):
        if name in changes:
            value = (changes[name] or "").strip()
            if not value:
                errors.append({"field": name, "error": "REQUIRED"})
            cleaned[name] = value

    for name, limit in (("bio", BIO_MAX_LENGTH), ("habits", HABITS_MAX_LENGTH)):
        if name in changes:
            value = changes[name] or ""
            if len(value) > limit:
                errors.append({"field": name, "error": "TOO_LONG"})
            cleaned[name] = value

    if errors:
        raise ValidationError("Invalid profile data", details=errors)
    return cleaned
