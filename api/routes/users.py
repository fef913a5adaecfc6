"""
api/routes/users.py -- Authentication and user management REST endpoints.

Routes:
  POST   /user/signup      -- create account; sets token cookie
  POST   /user/signin      -- password login; sets token cookie
  POST   /user/logout      -- ends the session named by the token cookie
  GET    /user             -- list users (public view)
  GET    /user/{user_id}   -- one user (public view)
  PUT    /user/{user_id}   -- update own record (bearer token, owner only)
  DELETE /user/{user_id}   -- delete own record (bearer token, owner only)

Dependency order on protected routes: require_owner is declared before the
validated body, so an ownership failure is reported even when the body is
also invalid.

Security:
  POST /signin is rate-limited (LOGIN_RATE_LIMIT, default 10/minute per IP).
  Cache-Control: no-store on every response that carries a token.
  The public user view never exposes password_hash or token_hash.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    AuthResponse,
    LoginRequest,
    SessionUser,
    SignupRequest,
    UserMessageResponse,
    UserResponse,
    UserUpdate,
)
from api.validation import Purpose, validated_body
from auth.dependencies import get_password_hasher, get_sessions, get_user_store, require_owner
from auth.models import Identity
from auth.passwords import PasswordHasher
from auth.session import SessionManager
from auth.store import UserStore
from core.config import get_settings
from core.errors import Conflict, InvalidId, NotFound
from core.ids import is_valid_id

SESSION_COOKIE = "token"

# Auth policy:
# - POST   /user/signup, /user/signin:  public
# - POST   /user/logout:                public -- the cookie itself is the credential
# - GET    /user, /user/{id}:           public
# - PUT    /user/{id}, DELETE:          bearer token whose id equals {id}
router = APIRouter()


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------


@router.post("/user/signup", response_model=AuthResponse)
def signup(
    body: SignupRequest = Depends(validated_body(Purpose.SIGNUP)),
    sessions: SessionManager = Depends(get_sessions),
) -> JSONResponse:
    """Create an account, open its first session and set the token cookie.

    Duplicate email (any letter case) -> 403.
    """
    payload, token = sessions.sign_up(body.full_name, body.email, body.password, is_active=body.is_active)
    return _session_response(payload, token, sessions.tokens.lifetime_seconds)


@limiter.limit(get_settings().login_rate_limit)  # above @router so the route keeps the undecorated signature
@router.post("/user/signin", response_model=AuthResponse)
def signin(
    request: Request,
    body: LoginRequest = Depends(validated_body(Purpose.LOGIN)),
    sessions: SessionManager = Depends(get_sessions),
) -> JSONResponse:
    """Verify email + password, issue a new token and set the token cookie.

    Unknown email -> 404, wrong password -> 400. A new signin replaces the
    stored session hash, so only the newest token can be used to log out.
    """
    payload, token = sessions.sign_in(body.email, body.password)
    return _session_response(payload, token, sessions.tokens.lifetime_seconds)


@router.post("/user/logout", response_model=UserMessageResponse)
def logout(request: Request, sessions: SessionManager = Depends(get_sessions)) -> JSONResponse:
    """End the session whose hash matches the token cookie and clear the cookie."""
    user = sessions.log_out(request.cookies.get(SESSION_COOKIE))
    resp = JSONResponse(
        content=UserMessageResponse(message="Logout", user=UserResponse.from_user(user)).model_dump(),
    )
    resp.delete_cookie(SESSION_COOKIE)
    return resp


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@router.get("/user", response_model=list[UserResponse])
def list_users(store: UserStore = Depends(get_user_store)) -> list[UserResponse]:
    return [UserResponse.from_user(u) for u in store.list_users()]


@router.get("/user/{user_id}", response_model=UserResponse)
def get_user(user_id: str, store: UserStore = Depends(get_user_store)) -> UserResponse:
    _check_id(user_id)
    user = store.get_by_id(user_id)
    if user is None:
        raise NotFound("User does not exist")
    return UserResponse.from_user(user)


# ---------------------------------------------------------------------------
# Owner-only endpoints
# ---------------------------------------------------------------------------


@router.put("/user/{user_id}", response_model=UserMessageResponse)
def update_user(
    user_id: str,
    identity: Identity = Depends(require_owner),
    body: UserUpdate = Depends(validated_body(Purpose.UPDATE)),
    store: UserStore = Depends(get_user_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserMessageResponse:
    """Update full_name, email and/or password on the caller's own record.

    A missing record is reported as 400, matching the invalid-id case. A new
    email that belongs to another account -> 403.
    """
    _check_id(user_id)
    user = store.get_by_id(user_id)
    if user is None:
        raise NotFound("User does not exist", status_code=400)

    updates: dict = {}
    if body.full_name is not None:
        updates["full_name"] = body.full_name
    if body.email is not None and body.email.lower() != user.email:
        if store.get_by_email(body.email) is not None:
            raise Conflict()
        updates["email"] = body.email
    if body.password is not None:
        updates["password_hash"] = hasher.hash(body.password)

    if updates:
        try:
            store.update_user(user_id, **updates)
        except IntegrityError as exc:
            raise Conflict() from exc

    updated = store.get_by_id(user_id)
    if updated is None:
        raise NotFound("User does not exist", status_code=400)
    return UserMessageResponse(message="Updated", user=UserResponse.from_user(updated))


@router.delete("/user/{user_id}", response_model=UserMessageResponse)
def delete_user(
    user_id: str,
    identity: Identity = Depends(require_owner),
    store: UserStore = Depends(get_user_store),
) -> UserMessageResponse:
    """Permanently delete the caller's own record."""
    _check_id(user_id)
    user = store.get_by_id(user_id)
    if user is None or not store.delete_user(user_id):
        raise NotFound("User was not found", status_code=400)
    return UserMessageResponse(message="Deleted", user=UserResponse.from_user(user))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_id(user_id: str) -> None:
    if not is_valid_id(user_id):
        raise InvalidId()


def _session_response(payload: dict, token: str, max_age: int) -> JSONResponse:
    """Build the {user, token} response and set the httpOnly token cookie.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": not sent on cross-site POST -- CSRF mitigation for logout.
    secure: only sent over HTTPS when SECURE_COOKIES=true.
    max_age: matches the token lifetime so both expire together.
    """
    resp = JSONResponse(
        status_code=200,
        content=AuthResponse(user=SessionUser(**payload), token=token).model_dump(),
    )
    resp.set_cookie(
        SESSION_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=get_settings().secure_cookies,
        max_age=max_age,
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
