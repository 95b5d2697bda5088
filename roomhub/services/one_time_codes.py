"""Short one-time codes for email verification and password reset."""

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from ..domain.models import Account, CodePurpose
from ..domain.ports.persistence import AccountRepository
from .password_hasher import CredentialHasher

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
DEFAULT_CODE_TTL = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OneTimeCodeEngine:
    """
    Issues and checks hashed, expiring, single-use codes.

    Only the bcrypt hash of a code is stored, in the slot named by its
    ``CodePurpose``. The engine does not know what a slot guards; callers
    apply the state transition through ``redeem``.
    """

    def __init__(
        self,
        repository: AccountRepository,
        hasher: CredentialHasher,
        ttl: timedelta = DEFAULT_CODE_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._hasher = hasher
        self._ttl = ttl
        self._clock = clock

    @staticmethod
    def generate() -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))

    def issue(self, account: Account, purpose: CodePurpose) -> str:
        """
        Store a fresh code for ``purpose``, replacing any previous one.

        Returns:
            The plaintext code, to be delivered out of band
        """
        code = self.generate()
        expires_at = self._clock() + self._ttl
        self._repository.set_pending_code(account.id, purpose, self._hasher.hash(code), expires_at)
        logger.info("Issued %s code for account %s", purpose.value, account.id)
        return code

    def verify(self, account: Account, purpose: CodePurpose, submitted: str) -> bool:
        """
        Check ``submitted`` against the stored code without consuming it.

        An expired code is cleared as a side effect and never matches.
        """
        pending = account.pending_code(purpose)
        if pending is None or not submitted:
            return False

        if pending.is_expired(self._clock()):
            self._repository.clear_pending_code(account.id, purpose, expected_hash=pending.code_hash)
            logger.info("Discarded expired %s code for account %s", purpose.value, account.id)
            return False

        return self._hasher.compare(self._normalize(submitted), pending.code_hash)

    def redeem(self, account: Account, purpose: CodePurpose, submitted: str, **changes: Any) -> bool:
        """
        Verify ``submitted`` and, in one atomic store update, clear the slot and apply ``changes``.

        Returns False when the code is wrong, expired or was consumed concurrently.
        """
        if not self.verify(account, purpose, submitted):
            return False
        pending = account.pending_code(purpose)
        consumed = self._repository.consume_pending_code(
            account.id, purpose, pending.code_hash, changes
        )
        if not consumed:
            logger.warning("Lost race consuming %s code for account %s", purpose.value, account.id)
        return consumed

    @staticmethod
    def _normalize(submitted: str) -> str:
        return submitted.strip().upper()
