"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in catalog/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    email is always stored lowercase; the store lowercases every probe so
    uniqueness and lookups are case-insensitive.

    token_hash is the HMAC of the most recently issued token. It is None while
    no session is live. Logout clears it and sets is_active to False. Token
    expiry does NOT clear it -- only an explicit logout does.
    """

    full_name: str
    email: str
    password_hash: str
    id: str | None = None
    is_active: bool = False
    token_hash: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The verified caller, rebuilt from a token payload.

    Only ever constructed from claims that passed signature verification.
    """

    id: str
    full_name: str
    email: str
    is_active: bool

    @classmethod
    def from_claims(cls, claims: dict) -> Identity:
        return cls(
            id=str(claims["id"]),
            full_name=claims.get("full_name", ""),
            email=claims.get("email", ""),
            is_active=bool(claims.get("is_active", False)),
        )
