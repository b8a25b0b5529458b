from __future__ import annotations

import os

# Set test environment BEFORE importing inkpost modules.
# inkpost.db creates the engine at module level using get_settings().db_url,
# so we must override the env vars before any inkpost imports.
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-integration-tests-only")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from inkpost.config import get_settings
from inkpost.db import get_session
from inkpost.main import app as fastapi_app
from inkpost.main import create_app
from inkpost.models.post import PostWrite
from inkpost.services.content import ContentStore
from inkpost.services.credentials import CredentialStore
from inkpost.services.gate import GuardMode
from inkpost.services.tokens import TokenService

TEST_LOGIN = "admin"
TEST_PASSWORD = "correct-horse-battery-staple"


# ── Database fixtures ─────────────────────────────────────────────────


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite engine for testing.

    Uses StaticPool so every connection shares the same in-memory database.
    Recreates tables per test for full isolation.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a fresh session per test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session) -> ContentStore:
    return ContentStore(session)


@pytest.fixture(name="make_post")
def make_post_fixture(store):
    """Insert a post through the content store; returns the PostRead."""

    def _make(
        title: str,
        tags: list[str] | None = None,
        published: bool = True,
        content: str = "Sixteen chars or more of body text.",
    ):
        return store.insert_post(
            PostWrite(title=title, content=content, published=published, tags=tags or [])
        )

    return _make


# ── Token fixtures ────────────────────────────────────────────────────


@pytest.fixture(name="token_service")
def token_service_fixture() -> TokenService:
    """TokenService sharing the app's secret."""
    return TokenService(get_settings().jwt_secret)


@pytest.fixture(name="admin_user")
def admin_user_fixture(session):
    return CredentialStore(session).register(TEST_LOGIN, TEST_PASSWORD)


# ── HTTP client fixtures ──────────────────────────────────────────────


@pytest.fixture(name="client")
def client_fixture(session):
    """TestClient on an app built with the gate bypassed, DB overridden."""
    app = create_app(guard_mode=GuardMode.BYPASSED)

    def _get_session_override():
        yield session

    app.dependency_overrides[get_session] = _get_session_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="client_no_auth")
def client_no_auth_fixture(session):
    """Production app (gate enforced), no Authorization header."""

    def _get_session_override():
        yield session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    with TestClient(fastapi_app) as tc:
        yield tc
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(name="auth_client")
def auth_client_fixture(session, admin_user):
    """Production app that performs a REAL login.

    Registers an admin in the test DB, logs in through /public/login and
    attaches the bearer token to every request.
    """

    def _get_session_override():
        yield session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    with TestClient(fastapi_app) as tc:
        resp = tc.post(
            "/public/login", json={"login": TEST_LOGIN, "password": TEST_PASSWORD}
        )
        assert resp.status_code == 200
        tc.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
        yield tc

    fastapi_app.dependency_overrides.clear()
