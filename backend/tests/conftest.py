"""
RecipeHub Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a brand-new in-memory SQLite database (aiosqlite,
       StaticPool) with the full schema, so service tests run against the
       real ORM mappings and constraints.

Fixture Hierarchy (all function-scoped):
    engine ─┬─ db_session ── make_user        (service tests)
            └─ session_factory ─┬─ test_client  (HTTP tests)
                                └─ make_account
"""

import os

# Override settings for testing BEFORE any recipehub imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ACCESS_TOKEN_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass
from typing import AsyncGenerator, Dict, List, Optional
from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import recipehub.models  # noqa: F401  (registers every table)
from recipehub.database import Base, get_db_session
from recipehub.models.user import User
from recipehub.security import create_access_token, hash_password

DEFAULT_PASSWORD = "correct-horse"


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class Account:
    """A committed user as seen by HTTP tests."""
    id: UUID
    username: str
    roles: List[str]

    @property
    def headers(self) -> Dict[str, str]:
        token = create_access_token(self.id, self.username, self.roles)
        return {"Authorization": f"Bearer {token}"}


def new_user(username: str, roles: Optional[List[str]], password: str, active: bool) -> User:
    return User(
        username=username,
        password=hash_password(password),
        roles=list(roles or ["Reader"]),
        active=active,
        saved=[],
    )


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with the full schema."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """One session for a whole service test; nothing is committed."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def make_user(db_session):
    """
    Factory adding a user to `db_session`.

    Usage:
        admin = await make_user("root", roles=["Admin"])
    """
    async def _make(
        username: str = "reader",
        roles: Optional[List[str]] = None,
        password: str = DEFAULT_PASSWORD,
        active: bool = True,
    ) -> User:
        user = new_user(username, roles, password, active)
        db_session.add(user)
        await db_session.flush()
        return user

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def make_account(session_factory):
    """Factory committing a user and returning an Account with bearer headers."""
    async def _make(
        username: str,
        roles: Optional[List[str]] = None,
        password: str = DEFAULT_PASSWORD,
        active: bool = True,
    ) -> Account:
        async with session_factory() as session:
            user = new_user(username, roles, password, active)
            session.add(user)
            await session.commit()
            return Account(id=user.id, username=user.username, roles=list(user.roles))

    return _make


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport,
    with get_db_session pointed at the test database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from recipehub.main import app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
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
