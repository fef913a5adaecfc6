"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

bcrypt only looks at the first 72 bytes of its input, and bcrypt >= 4.1
raises on longer input. Passwords above that limit are pre-hashed with
SHA-256 and base64-encoded (44 bytes) so every byte of a long password
counts and no length is rejected.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import base64
import hashlib

import bcrypt

_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted adaptive hashing with a tunable work factor.

    Usage:
        hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
        digest = hasher.hash("secret")
        hasher.verify("secret", digest)  # True
    """

    def __init__(self, rounds: int = 10) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31.")
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password."""
        return bcrypt.hashpw(_prepare(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        A malformed digest is a mismatch, not an error.
        """
        try:
            return bcrypt.checkpw(_prepare(plain), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


def _prepare(plain: str) -> bytes:
    raw = plain.encode("utf-8")
    if len(raw) > _BCRYPT_MAX_BYTES:
        return base64.b64encode(hashlib.sha256(raw).digest())
    return raw
