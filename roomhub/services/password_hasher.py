"""One-way hashing for passwords and one-time codes."""

from typing import Optional

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72


class CredentialHasher:
    """Salted bcrypt hashing with a fixed work factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: Optional[bytes] = None

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(self._encode(plaintext), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def compare(self, plaintext: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(self._encode(plaintext), hashed.encode("utf-8"))
        except ValueError:
            # Malformed hash in storage
            return False

    def compare_dummy(self, plaintext: str) -> None:
        """Spend one comparison at the same cost so unknown accounts are not faster to reject."""
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"roomhub-dummy", bcrypt.gensalt(rounds=self.rounds))
        bcrypt.checkpw(self._encode(plaintext), self._dummy_hash)

    @staticmethod
    def _encode(plaintext: str) -> bytes:
        return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]
