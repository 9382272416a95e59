"""
Linkhub Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy (all function-scoped, fresh per test):
    ├── db_engine:    in-memory SQLite engine with the schema created
    ├── db_session:   AsyncSession for service-level tests
    ├── make_user:    factory that inserts a user and returns it
    └── test_client:  HTTPX AsyncClient over a fresh app instance whose
                      session dependency points at db_engine
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

import itertools
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers every table on Base.metadata
from app.database import Base, get_db_session
from app.models.user import User

_user_counter = itertools.count(1)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite engine shared by every session of one test.

    StaticPool keeps a single connection alive; without it each new
    connection would open a brand-new empty database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides an async database session for service tests.

    Usage:
        async def test_follow(db_session, make_user):
            a, b = await make_user("A"), await make_user("B")
            await connection_service.follow(db_session, a.id, b.id)
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """
    Factory fixture: inserts a user and returns the ORM instance.

    Emails are unique per call, so tests only name the users they care about.
    """

    async def _make_user(name: str = "User", **fields) -> User:
        n = next(_user_counter)
        user = User(
            name=name,
            email=fields.pop("email", f"user{n}@example.com"),
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    Provides an async HTTP test client for endpoint testing.

    A fresh app per test keeps rate-limit state and dependency overrides
    from leaking between tests.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.main import create_app

    application = create_app()

    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = _override_session

    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
