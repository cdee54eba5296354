"""
tests/conftest.py -- Shared test fixtures for PawPass.

This module provides:
  - settings / store / service: unit-level fixtures over an in-memory DB
  - cookies: a recording CookieWriter for asserting cookie side effects
  - api_client: TestClient wired to an isolated store via a patched lifespan

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread.

Environment variables must be set before any api/ import: api.main resolves
Settings at import time to configure its middleware.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

TEST_SECRET = "pawpass-test-secret-0123456789abcdef0123456789abcdef"

# CRITICAL: set before importing api/ or core/.
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = TEST_SECRET
os.environ["AUTH_RATE_LIMIT"] = "1000/minute"
os.environ.pop("PORT", None)
os.environ.pop("SECURE_COOKIES", None)

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import CredentialService
from auth.store import UserStore
from core.config import Settings, get_settings

SEED_USERNAME = "rex"
SEED_EMAIL = "rex@example.com"
SEED_PASSWORD = "woofwoof1"


class RecordingCookies:
    """CookieWriter that records calls instead of touching a response."""

    def __init__(self) -> None:
        self.set_calls: list[dict] = []
        self.clear_calls: list[dict] = []

    def set(self, name: str, value: str, *, httponly: bool, samesite: str, secure: bool) -> None:
        self.set_calls.append(
            {"name": name, "value": value, "httponly": httponly, "samesite": samesite, "secure": secure}
        )

    def clear(self, name: str, *, httponly: bool, samesite: str, secure: bool) -> None:
        self.clear_calls.append({"name": name, "httponly": httponly, "samesite": samesite, "secure": secure})


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(debug=True, secret_key=TEST_SECRET)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def service(store: UserStore, settings: Settings) -> CredentialService:
    return CredentialService(store, settings)


@pytest.fixture
def cookies() -> RecordingCookies:
    return RecordingCookies()


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore):
    """Return a lifespan that wires the test store into app.state."""

    @asynccontextmanager
    async def test_lifespan(app):
        settings = get_settings()
        app.state.settings = settings
        app.state.user_store = user_store
        app.state.credential_service = CredentialService(user_store, settings)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client(request: pytest.FixtureRequest) -> Generator[TestClient, None, None]:
    """Yield a TestClient whose store already holds the seed user.

    base_url uses localhost so TrustedHostMiddleware accepts the requests.
    Each test module gets its own named in-memory DB.
    """
    db_name = f"test_auth_{request.module.__name__}"
    user_store = UserStore(db_url=f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    user_store.create_user(SEED_USERNAME, SEED_EMAIL, SEED_PASSWORD)

    app.router.lifespan_context = _patch_lifespan(user_store)

    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client

    user_store.close()


@pytest.fixture
def client(api_client: TestClient) -> TestClient:
    """The module's TestClient with an empty cookie jar, so every test starts anonymous."""
    api_client.cookies.clear()
    return api_client
