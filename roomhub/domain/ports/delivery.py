from __future__ import annotations

from typing import Protocol

from ..models import CodePurpose


class CodeDelivery(Protocol):
    """Out-of-band delivery of one-time codes."""

    def send_code(
        self,
        to_email: str,
        recipient_name: str,
        code: str,
        purpose: CodePurpose,
        resend: bool = False,
    ) -> bool:
        ...


class ImageStorage(Protocol):
    """Third-party host for profile photos."""

    def store(self, content: bytes, account_id: int) -> str:
        ...

    def delete(self, url: str) -> None:
        ...
