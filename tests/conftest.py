"""
tests/conftest.py -- Shared test fixtures for Shopfront tests.

This module provides:
  - _make_test_stores(): isolated shared-memory SQLite stores per test module
  - _patch_lifespan(): wires test services into app.state, bypassing real startup
  - api_client: TestClient running the real app against the test stores
  - token_service / hasher / user_store: unit-level building blocks

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread.

DEBUG, BCRYPT_ROUNDS and LOGIN_RATE_LIMIT must be set before any app import:
get_settings() is read at import time by the routes and the dev-mode key is
generated on first call.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# Set before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.passwords import PasswordHasher
from auth.session import SessionManager
from auth.store import UserStore
from auth.tokens import TokenService
from catalog.store import ProductStore

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ProductStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_shop_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url), ProductStore(url)


def _patch_lifespan(user_store: UserStore, product_store: ProductStore):
    """Return an async context manager that replaces the real lifespan.

    Services are built with a fixed signing key so tests can mint their own
    tokens through app.state.token_service.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        tokens = TokenService(TEST_SECRET, 3600)
        hasher = PasswordHasher(rounds=4)
        app.state.token_service = tokens
        app.state.password_hasher = hasher
        app.state.user_store = user_store
        app.state.product_store = product_store
        app.state.sessions = SessionManager(user_store, hasher, tokens)
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped client -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real FastAPI app wired to in-memory stores.

    The client keeps a cookie jar across requests; tests that depend on the
    token cookie should clear or set it explicitly.
    """
    suffix = request.module.__name__.rsplit(".", 1)[-1]
    user_store, product_store = _make_test_stores(suffix)
    app.router.lifespan_context = _patch_lifespan(user_store, product_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    user_store.close()
    product_store.close()


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, 3600)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def sessions(user_store: UserStore, hasher: PasswordHasher, token_service: TokenService) -> SessionManager:
    return SessionManager(user_store, hasher, token_service)
