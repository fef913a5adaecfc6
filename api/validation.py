"""
api/validation.py -- Request body validation ahead of route handlers.

Each route that takes a body names a Purpose. The Purpose picks the pydantic
schema from SCHEMAS; validated_body() reads the JSON body, validates it and
hands the handler a fully coerced model, so handlers never see raw input.

Dispatch is keyed by an enum rather than free-form strings. SCHEMAS is checked
for exhaustiveness at import time, and validated_body() resolves its purpose
when the route module is imported -- a typo in a route definition fails at
startup, never on a request. validate() still accepts the string value of a
purpose for callers outside the route table and raises UnknownSchema for an
unregistered one.

Failures raise core.errors.ValidationError (400) with a details list:
    [{"field": "email", "message": "value is not a valid email address: ...", "type": "value_error"}]
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Union

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from api.models import LoginRequest, ProductCreate, ProductUpdate, SignupRequest, UserUpdate
from core.errors import UnknownSchema, ValidationError


class Purpose(str, Enum):
    SIGNUP = "signup"
    LOGIN = "login"
    UPDATE = "update"
    CREATE_PRODUCT = "createProduct"
    UPDATE_PRODUCT = "updateProduct"


SCHEMAS: dict[Purpose, type[BaseModel]] = {
    Purpose.SIGNUP: SignupRequest,
    Purpose.LOGIN: LoginRequest,
    Purpose.UPDATE: UserUpdate,
    Purpose.CREATE_PRODUCT: ProductCreate,
    Purpose.UPDATE_PRODUCT: ProductUpdate,
}

_unmapped = set(Purpose) - set(SCHEMAS)
if _unmapped:
    raise RuntimeError(f"Purposes without a schema: {sorted(p.value for p in _unmapped)}")


def resolve(purpose: Union[Purpose, str]) -> Purpose:
    """Return the Purpose for purpose, raising UnknownSchema if it is not registered."""
    if isinstance(purpose, Purpose):
        return purpose
    try:
        return Purpose(purpose)
    except ValueError as exc:
        raise UnknownSchema(f"'{purpose}' validator does not exist") from exc


def validate(purpose: Union[Purpose, str], body: Any) -> BaseModel:
    """Validate body against the schema registered for purpose.

    Returns the coerced model (defaults applied, strings trimmed where the
    schema says so). Raises UnknownSchema or ValidationError.
    """
    schema = SCHEMAS[resolve(purpose)]
    if not isinstance(body, dict):
        raise ValidationError(
            "Request body must be a JSON object.",
            details=[{"field": "", "message": "must be an object", "type": "dict_type"}],
        )
    try:
        return schema.model_validate(body)
    except PydanticValidationError as exc:
        details = _details(exc)
        first = details[0]
        raise ValidationError(f'"{first["field"]}" {first["message"]}', details=details) from exc


def validated_body(purpose: Union[Purpose, str]) -> Callable:
    """Return a FastAPI dependency that yields the validated body for purpose.

    Usage:
        @router.post("/user/signup")
        def signup(body: SignupRequest = Depends(validated_body(Purpose.SIGNUP))): ...
    """
    resolved = resolve(purpose)

    async def dependency(request: Request) -> BaseModel:
        try:
            body = await request.json()
        except ValueError as exc:
            raise ValidationError(
                "Request body must be valid JSON.",
                details=[{"field": "", "message": "invalid JSON", "type": "json_invalid"}],
            ) from exc
        return validate(resolved, body)

    dependency.__name__ = f"validated_{resolved.value}_body"
    return dependency


def _details(exc: PydanticValidationError) -> list[dict]:
    # ctx may hold exception objects that are not JSON serializable; keep only plain fields.
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
