"""
auth/session.py -- Signup, signin and logout.

States: anonymous -> authenticated (token_hash stored, is_active true) ->
anonymous (token_hash cleared, is_active false).

One live session per user: every signup/signin overwrites the stored hash,
so the previous token can no longer be used to log out. It stays a valid
bearer token for the gate until it expires -- the gate checks signature and
expiry only, never the stored hash.

Layer rule: no imports from api/ or catalog/. Inputs arrive already
validated by api/validation.py.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenService
from core.errors import BadCredential, Conflict, InvalidToken, MissingToken, NotFound

logger = logging.getLogger("shopfront.auth")


def build_payload(user: User, password: str | None = None, is_active: bool | None = None) -> dict:
    """Return the token payload for user.

    password defaults to the stored hash. Signup may pass the submitted
    plaintext instead for the response echo; that value never goes into a
    token. is_active defaults to the stored flag; signup reports the flag
    from the request body even though the record itself is stored active.
    """
    return {
        "id": user.id,
        "full_name": user.full_name,
        "email": user.email,
        "password": password if password is not None else user.password_hash,
        "is_active": user.is_active if is_active is None else is_active,
    }


class SessionManager:
    """Orchestrates the credential hasher, token service and user store."""

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        echo_signup_password: bool = True,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.echo_signup_password = echo_signup_password

    def sign_up(self, full_name: str, email: str, password: str, is_active: bool = False) -> tuple[dict, str]:
        """Create an account and open its first session.

        The record is always stored active. is_active is the flag the client
        sent (false when omitted) and is what the token and the response
        report. Returns (payload, token). Raises Conflict if the email is taken
        in any letter case.
        """
        if self.store.get_by_email(email) is not None:
            raise Conflict()

        user = User(
            full_name=full_name,
            email=email.lower(),
            password_hash=self.hasher.hash(password),
            is_active=True,
        )
        try:
            user.id = self.store.create_user(user)
        except IntegrityError as exc:
            # A concurrent signup won the race between the check and the insert.
            raise Conflict() from exc

        token = self._open_session(user, build_payload(user, is_active=is_active))
        logger.info("User signed up: %s", user.id)
        payload = build_payload(user, password if self.echo_signup_password else None, is_active=is_active)
        return payload, token

    def sign_in(self, email: str, password: str) -> tuple[dict, str]:
        """Verify credentials and open a new session. Returns (payload, token)."""
        user = self.store.get_by_email(email)
        if user is None:
            raise NotFound("User does not exist")
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Failed signin for user %s", user.id)
            raise BadCredential()

        user.is_active = True
        token = self._open_session(user, build_payload(user))
        logger.info("User signed in: %s", user.id)
        return build_payload(user), token

    def log_out(self, token: str | None) -> User:
        """Close the session whose stored hash matches token. Returns the updated user."""
        if not token:
            raise MissingToken()
        user = self.store.end_session(self.tokens.hash_token(token))
        if user is None:
            raise InvalidToken()
        logger.info("User logged out: %s", user.id)
        return user

    def _open_session(self, user: User, claims: dict) -> str:
        token = self.tokens.issue(claims)
        user.token_hash = self.tokens.hash_token(token)
        self.store.start_session(user.id, user.token_hash)
        return token
