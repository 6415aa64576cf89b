import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


class Argon2PasswordHasher:
    """Argon2id password hashing (PHC string format)."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self.ph = hasher or PasswordHasher()
        self._dummy_hash: str | None = None

    def hash_password(self, password: str) -> str:
        return str(self.ph.hash(password))

    def verify_password(self, password: str, hash_str: str) -> bool:
        try:
            self.ph.verify(hash_str, password)
            return True
        except VerifyMismatchError:
            return False
        except (VerificationError, InvalidHashError):
            # Corrupt stored hash; treat as a failed login, not a crash.
            return False

    def dummy_hash(self) -> str:
        """A hash with the same parameters as real ones, matching no password."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password(secrets.token_urlsafe(32))
        return self._dummy_hash
