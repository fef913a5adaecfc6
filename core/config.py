"""
core/config.py -- Shopfront settings, read from the environment by pydantic-settings.

This is the single place that looks at environment variables. Other modules
call get_settings() and never touch os.environ themselves.

get_settings() is wrapped in lru_cache, so Settings is built once per process
and every Depends()/import-time caller shares the same instance. Env var
names are the upper-cased field names (token_expire_seconds ->
TOKEN_EXPIRE_SECONDS); a local .env file is honoured when present.

The signing key, token lifetime and bcrypt cost are handed to TokenService
and PasswordHasher by the api/main.py lifespan. The auth package itself
never imports this module.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or catalog/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("shopfront.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'shopfront.db'}"
_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Runtime configuration. Every field has a default except the signing key in production."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- runtime ---
    debug: bool = False
    # "" means unset; check_secret_key() replaces or rejects it.
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # --- sessions ---
    secure_cookies: bool = False
    # Also used as the token cookie max_age.
    token_expire_seconds: int = Field(default=3600, gt=0)
    # bcrypt only accepts 4..31.
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    # false -> signup responses carry the stored hash instead of the submitted password.
    echo_signup_password: bool = True

    # --- http ---
    login_rate_limit: str = "10/minute"
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        """Fill in or reject SECRET_KEY.

        With DEBUG=true a missing key is replaced by a random one, so tokens
        die with the process. Without DEBUG a missing key stops startup.
        A key shorter than 32 characters is refused either way, since it
        signs tokens and keys the session-hash HMAC.
        """
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is required when DEBUG is off. "
                    "Export SECRET_KEY or add it to .env, or set DEBUG=true for local work."
                )
            self.secret_key = secrets.token_hex(32)
            logger.warning("SECRET_KEY not set; generated a throwaway key. Issued tokens die with this process.")
        if len(self.secret_key) < _MIN_SECRET_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_SECRET_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, building it on first use.

    Tests that change the environment afterwards must call
    get_settings.cache_clear().
    """
    return Settings()
