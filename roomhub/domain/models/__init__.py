"""Domain models for the roomhub accounts service."""

from .account import Account, CodePurpose, PendingCode, Role

__all__ = [
    "Account",
    "CodePurpose",
    "PendingCode",
    "Role",
]
