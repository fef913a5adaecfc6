"""
auth/tokens.py -- Signed bearer tokens and the session hash.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the user's id, full_name, email,
       password hash and is_active flag plus iat/exp/jti. The payload is signed,
       not encrypted -- the only credential in it is the bcrypt hash, never a
       plaintext password.

  Verification order: shape first (three base64url segments), then the
       HMAC over the raw "header.payload" bytes, then the header alg, and
       only then the claims. The signature segment must also be the canonical
       unpadded encoding of its bytes, since base64 decoders ignore the spare
       low bits of the last character. Any altered character of a well-shaped
       token therefore produces InvalidSignature, whichever segment it is in.

  Session hash: HMAC-SHA256(secret_key, token). The user record stores this
       digest of the last issued token. It must be deterministic so logout can
       find the record by it; the HMAC key means a leaked DB does not let an
       attacker match tokens without also knowing the secret.

  No module-level key: TokenService is constructed once in the app lifespan
       with the configured key and lifetime and read from app.state by the
       request dependencies.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import uuid
from calendar import timegm
from datetime import datetime, timezone

from jose import jws, jwt
from jose.exceptions import ExpiredSignatureError, JWSError, JWTError
from jose.utils import base64url_decode, base64url_encode

_ALGORITHM = "HS256"
_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]*")


class TokenError(Exception):
    """Base class for token verification failures."""

    code = "invalid_token"


class MalformedToken(TokenError):
    code = "malformed_token"


class InvalidSignature(TokenError):
    code = "invalid_signature"


class TokenExpired(TokenError):
    code = "token_expired"


class TokenService:
    """Issue and verify HS256 tokens with a fixed lifetime.

    Usage:
        tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
        token = tokens.issue({"id": user.id, "email": user.email})
        claims = tokens.verify(token)
    """

    def __init__(self, secret_key: str, lifetime_seconds: int) -> None:
        if not secret_key:
            raise ValueError("A signing key is required.")
        if lifetime_seconds <= 0:
            raise ValueError("Token lifetime must be positive.")
        self._secret_key = secret_key
        self.lifetime_seconds = lifetime_seconds

    def issue(self, payload: dict, issued_at: datetime | None = None) -> str:
        """Sign payload with iat and exp = iat + lifetime.

        issued_at defaults to now; exp is always exactly lifetime_seconds later.
        A random jti makes two tokens issued in the same second differ.
        """
        iat = timegm((issued_at or datetime.now(timezone.utc)).utctimetuple())
        claims = dict(payload)
        claims["iat"] = iat
        claims["exp"] = iat + self.lifetime_seconds
        claims["jti"] = uuid.uuid4().hex
        return jwt.encode(claims, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> dict:
        """Return the verified claims or raise a TokenError subclass."""
        segments = token.split(".") if token else []
        if len(segments) != 3 or not all(_SEGMENT_RE.fullmatch(s) for s in segments):
            raise MalformedToken("Token is not a compact JWS.")
        if not segments[0] or not segments[1]:
            raise MalformedToken("Token header or payload is empty.")

        signing_input, _, signature = token.rpartition(".")
        self._check_signature(signing_input, signature)

        try:
            jwt.get_unverified_header(token)
        except JWTError as exc:
            raise MalformedToken("Token could not be decoded.") from exc

        # Rejects any header alg other than HS256.
        try:
            jws.verify(token, self._secret_key, algorithms=[_ALGORITHM])
        except JWSError as exc:
            raise InvalidSignature("Signature verification failed.") from exc

        try:
            return jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired.") from exc
        except JWTError as exc:
            raise MalformedToken(f"Invalid token claims: {exc}") from exc

    def _check_signature(self, signing_input: str, signature: str) -> None:
        try:
            raw = base64url_decode(signature.encode("ascii"))
        except (ValueError, TypeError) as exc:
            raise InvalidSignature("Signature is not valid base64url.") from exc
        if base64url_encode(raw).decode("ascii") != signature:
            raise InvalidSignature("Signature is not canonically encoded.")
        expected = hmac.new(self._secret_key.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()
        if not hmac.compare_digest(expected, raw):
            raise InvalidSignature("Signature verification failed.")

    def hash_token(self, token: str) -> str:
        """Return HMAC-SHA256(secret_key, token) as a hex string."""
        return hmac.new(
            self._secret_key.encode(),
            token.encode(),
            hashlib.sha256,
        ).hexdigest()
