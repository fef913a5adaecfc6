"""
API request and response models for Shopfront REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
catalog/models.py, which own the internal domain representation. Route
handlers map between the two.

Request models are not bound to route parameters directly. They are the
schemas behind api/validation.py, which runs them ahead of the handler and
reports failures as 400s.

Every request model forbids unknown fields.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from auth.models import User
from catalog.models import Product

_TrimmedText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
_Password = Annotated[str, StringConstraints(min_length=1, max_length=1024)]


# ---------------------------------------------------------------------------
# User request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/user/signup."""

    model_config = ConfigDict(extra="forbid")

    full_name: _TrimmedText
    email: EmailStr
    password: _Password
    is_active: bool = False


class LoginRequest(BaseModel):
    """Request body for POST /api/user/signin."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: _Password


class UserUpdate(BaseModel):
    """Request body for PUT /api/user/{user_id}. Every field is optional.

    is_active is accepted for compatibility but the handler does not apply it;
    only signin/logout move the active flag.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: Optional[_TrimmedText] = None
    email: Optional[EmailStr] = None
    password: Optional[_Password] = None
    is_active: Optional[bool] = None


# ---------------------------------------------------------------------------
# Product request models
# ---------------------------------------------------------------------------


class ProductCreate(BaseModel):
    """Request body for POST /api/product."""

    model_config = ConfigDict(extra="forbid")

    title: _TrimmedText
    price: Annotated[str, StringConstraints(min_length=1, max_length=64)]
    description: Optional[Annotated[str, StringConstraints(min_length=1, max_length=5000)]] = None


class ProductUpdate(BaseModel):
    """Request body for PUT /api/product/{product_id}."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[_TrimmedText] = None
    price: Optional[Annotated[str, StringConstraints(min_length=1, max_length=64)]] = None
    description: Optional[Annotated[str, StringConstraints(min_length=1, max_length=5000)]] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SessionUser(BaseModel):
    """The identity payload returned by signup and signin.

    password is the submitted plaintext on signup (unless
    ECHO_SIGNUP_PASSWORD=false) and the stored bcrypt hash on signin.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str
    email: str
    password: str
    is_active: bool


class AuthResponse(BaseModel):
    """Response for POST /api/user/signup and /api/user/signin."""

    model_config = ConfigDict(frozen=True)

    user: SessionUser
    token: str


class UserResponse(BaseModel):
    """Public view of a user. Never includes the password or session hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str
    email: str
    is_active: bool
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            is_active=user.is_active,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class UserMessageResponse(BaseModel):
    """Response for logout, update and delete on /api/user."""

    model_config = ConfigDict(frozen=True)

    message: str
    user: UserResponse


class ProductResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    price: str
    description: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            title=product.title,
            price=product.price,
            description=product.description,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductMessageResponse(BaseModel):
    """Response for update and delete on /api/product."""

    model_config = ConfigDict(frozen=True)

    message: str
    product: ProductResponse


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on 4xx/5xx responses.

    message is human-readable; code is machine-readable and stable.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    code: str
    detail: Optional[list | str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
