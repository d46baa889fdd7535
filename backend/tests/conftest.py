"""
CarVault Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite +
       StaticPool, so all sessions of one test share the same connection).
       The API client overrides `get_db_session` to use it, keeping the
       commit-on-success / rollback-on-error behavior of the real dependency.

Fixture Hierarchy (all function-scoped):
    test_engine
    └── session_factory
        ├── db_session:     one AsyncSession for service-level tests
        ├── owner / stranger: users created in db_session, as CurrentUser
        ├── api_users:      two committed users + bearer headers for API tests
        └── test_client:    HTTPX AsyncClient bound to the FastAPI app
    sample_image_bytes / other_image_bytes: tiny image payloads
"""

import os
from typing import AsyncGenerator, Dict

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DB_CREATE_ALL"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db_session
from app.models.car import Car, CarImage  # noqa: F401
from app.models.user import User
from app.security import CurrentUser, create_access_token


async def _make_user(session: AsyncSession, username: str, email: str) -> User:
    # Service tests never log in, so a real bcrypt hash is not needed here
    user = User(username=username, email=email, hashed_password="not-a-real-hash")
    session.add(user)
    await session.flush()
    return user


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A real AsyncSession on the per-test database.

    Usage:
        async def test_create(db_session, owner):
            car = await car_service.create_car(db_session, owner, "A", "B")
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def owner(db_session) -> CurrentUser:
    user = await _make_user(db_session, "alice", "alice@example.com")
    return CurrentUser(id=user.id)


@pytest_asyncio.fixture
async def stranger(db_session) -> CurrentUser:
    user = await _make_user(db_session, "mallory", "mallory@example.com")
    return CurrentUser(id=user.id)


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def api_users(session_factory) -> Dict[str, Dict[str, str]]:
    """
    Two committed users with ready-to-send Authorization headers.

    Returns:
        {"alice": {"id": ..., "headers": {...}}, "bob": {...}}
    """
    async with session_factory() as session:
        alice = await _make_user(session, "alice", "alice@example.com")
        bob = await _make_user(session, "bob", "bob@example.com")
        await session.commit()

    return {
        name: {
            "id": str(user.id),
            "headers": {"Authorization": f"Bearer {create_access_token(user.id)}"},
        }
        for name, user in (("alice", alice), ("bob", bob))
    }


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    Async HTTP client talking to the FastAPI app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Payload Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_image_bytes() -> bytes:
    """Minimal JPEG: SOI + JFIF APP0 header + EOI. Content is never inspected."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def other_image_bytes() -> bytes:
    """PNG signature followed by a few arbitrary bytes."""
    return b'\x89PNG\r\n\x1a\n' + b'\x00\x01\x02\x03'
