"""
auth/dependencies.py -- FastAPI Depends() helpers: service accessors and the
authorization gate.

Services are built once in the app lifespan (api/main.py) and live on
app.state. The accessors below are the only way request code reaches them,
so tests can swap any of them by patching app.state.

The gate (require_owner) protects mutating routes on /user/{user_id}:
  1. Authorization: Bearer <token> must be present and well formed (403).
  2. The token must verify -- signature, structure, expiry (400).
  3. The verified id must equal the path id (403).
On success the Identity is attached to request.state.identity. The gate
never reads or writes the store.

Layer rule: no imports from api/ or catalog/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import Identity
from auth.passwords import PasswordHasher
from auth.session import SessionManager
from auth.store import UserStore
from auth.tokens import TokenError, TokenService
from core.errors import Forbidden, Unauthenticated

logger = logging.getLogger("shopfront.auth")


# ---------------------------------------------------------------------------
# Service accessors
# ---------------------------------------------------------------------------


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


# ---------------------------------------------------------------------------
# Authorization gate
# ---------------------------------------------------------------------------


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an Authorization header value.

    Raises Unauthenticated if the header is absent, the scheme is not Bearer,
    or the token part is empty.
    """
    if not authorization:
        raise Unauthenticated()
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise Unauthenticated()
    return token


def is_owner(identity: Identity, target_id: str) -> bool:
    """Ownership rule: a user may only act on their own record."""
    return identity.id == target_id


def authenticate(request: Request) -> Identity:
    """Verify the request's bearer token and return the caller's Identity.

    Verification failures are reported as 400 with the token error's code
    (malformed_token, invalid_signature, token_expired).
    """
    token = bearer_token(request.headers.get("Authorization"))
    try:
        claims = get_token_service(request).verify(token)
    except TokenError as exc:
        logger.info("Rejected bearer token on %s: %s", request.url.path, exc.code)
        raise Unauthenticated(str(exc), code=exc.code, status_code=400) from exc
    if "id" not in claims:
        raise Unauthenticated("Token carries no identity.", code="malformed_token", status_code=400)
    return Identity.from_claims(claims)


def require_owner(request: Request, user_id: str) -> Identity:
    """Require a valid bearer token whose id matches the {user_id} path parameter.

    Use as the first dependency of a protected route so it runs before body
    validation:
        @router.put("/user/{user_id}")
        def route(identity: Identity = Depends(require_owner), body=Depends(validated_body(...))): ...
    """
    identity = authenticate(request)
    if not is_owner(identity, user_id):
        raise Forbidden()
    request.state.identity = identity
    return identity
