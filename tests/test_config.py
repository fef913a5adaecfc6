"""
tests/test_config.py -- SECRET_KEY policy and numeric bounds in core/config.py.

Settings is constructed directly with _env_file=None so a developer's .env
never leaks into the assertions.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings

GOOD_KEY = "k" * 32


def test_debug_mode_generates_key(monkeypatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    settings = Settings(_env_file=None)
    assert len(settings.secret_key) >= 32


def test_production_requires_key(monkeypatch) -> None:
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_short_key_rejected(monkeypatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("SECRET_KEY", "short")
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(_env_file=None)


def test_explicit_key_kept(monkeypatch) -> None:
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("SECRET_KEY", GOOD_KEY)
    assert Settings(_env_file=None).secret_key == GOOD_KEY


@pytest.mark.parametrize("name, value", [("TOKEN_EXPIRE_SECONDS", "0"), ("BCRYPT_ROUNDS", "3"), ("BCRYPT_ROUNDS", "32")])
def test_numeric_bounds(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv("SECRET_KEY", GOOD_KEY)
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_defaults(monkeypatch) -> None:
    monkeypatch.setenv("SECRET_KEY", GOOD_KEY)
    monkeypatch.delenv("TOKEN_EXPIRE_SECONDS", raising=False)
    monkeypatch.delenv("ECHO_SIGNUP_PASSWORD", raising=False)
    settings = Settings(_env_file=None)
    assert settings.token_expire_seconds == 3600
    assert settings.echo_signup_password is True
