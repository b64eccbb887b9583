"""
Pytest configuration and shared fixtures.

The app is exercised in-process through httpx's ASGI transport. Every test
gets its own SQLite database file, wired in by overriding get_async_db.

Run:
    pytest backend/tests -v
"""

import os
import tempfile

# Must be set before anything imports config.settings
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{tempfile.gettempdir()}/bug_tracker_app.db")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["LOG_TO_FILE"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy import update
from sqlalchemy.pool import NullPool

from database import get_async_db
from main import app
from models import Base, User as UserModel, UserRole


VALID_BUG = {
    "title": "Test Bug Title",
    "description": "enough characters here",
    "priority": "high",
    "severity": "major",
    "createdBy": "John Doe",
}

TEST_PASSWORD = "TestPass123!"


# ═══════════════════════════════════════════════════════════════════════════
# Database
# ═══════════════════════════════════════════════════════════════════════════


@pytest.fixture
async def engine(tmp_path):
    """Fresh schema in a throwaway SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Provide an async DB session for a single test."""
    async with session_factory() as session:
        yield session


# ═══════════════════════════════════════════════════════════════════════════
# HTTP client
# ═══════════════════════════════════════════════════════════════════════════


def _use_test_db(session_factory):
    async def override_get_async_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = override_get_async_db


@pytest.fixture
async def client(session_factory):
    """AsyncClient bound to the app, using the per-test database."""
    _use_test_db(session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def lenient_client(session_factory):
    """Like `client`, but returns the 500 response instead of re-raising the server error."""
    _use_test_db(session_factory)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client, session_factory):
    """Factory that registers a user and returns the response `data` (token + user).

    Signup only grants the user role to anonymous callers, so any other role
    is applied directly in the database afterwards. Cookies set by signup are
    dropped so each request only carries the credentials a test passes
    explicitly.
    """

    async def _signup(email: str = "alice@example.com", password: str = TEST_PASSWORD,
                      name: str = "Alice", role: str = "user"):
        resp = await client.post("/api/auth/signup", json={
            "name": name,
            "email": email,
            "password": password,
        })
        assert resp.status_code == 201, f"Signup failed: {resp.text}"
        client.cookies.clear()
        data = resp.json()["data"]
        if role != "user":
            async with session_factory() as session:
                await session.execute(
                    update(UserModel).where(UserModel.id == data["user"]["id"]).values(role=UserRole(role))
                )
                await session.commit()
            data["user"]["role"] = role
        return data

    return _signup


@pytest.fixture
def valid_bug():
    return dict(VALID_BUG)


@pytest.fixture
def create_bug(client):
    """Factory that creates a bug from VALID_BUG plus overrides and returns its JSON."""

    async def _create(**overrides):
        resp = await client.post("/api/bugs", json={**VALID_BUG, **overrides})
        assert resp.status_code == 201, f"Bug creation failed: {resp.text}"
        return resp.json()["data"]

    return _create
