"""
ProjectHub Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets a fresh in-memory SQLite database (aiosqlite) with all
       tables created; the app's session dependency is overridden to use it.
       The HTTP client talks to the app through httpx's ASGITransport, so no
       server (and no lifespan: no sweeper, no startup table creation) runs.

Fixture Hierarchy:
    ├── engine:            in-memory SQLite engine with tables
    ├── session_factory:   sessionmaker bound to that engine
    ├── db_session:        one session for service/repository tests
    ├── app:               FastAPI app with get_db_session overridden
    ├── client:            httpx AsyncClient over ASGITransport
    ├── user / other_user: committed User rows
    └── auth_headers:      Bearer header for `user`
"""

import os

# Settings are read at import time; configure before any projecthub import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_FORMAT"] = "text"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from projecthub.database import Base, get_db_session
from projecthub.middleware.rate_limit import clear_all_rate_limits
from projecthub.models import Notification, User
from projecthub.security import create_session_token


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
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
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate-limit state is process-wide; every test starts clean."""
    clear_all_rate_limits()
    yield
    clear_all_rate_limits()


@pytest.fixture
def app(session_factory):
    from projecthub.main import create_app

    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Usage:
        async def test_health(client):
            response = await client.get("/api/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Data
# ══════════════════════════════════════════════════════════════════════════

async def _create_user(session_factory, email: str, full_name: str, role: str) -> User:
    async with session_factory() as session:
        user = User(email=email, full_name=full_name, role=role)
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def user(session_factory) -> User:
    return await _create_user(session_factory, "alice@example.com", "Alice Manager", "PROJECT_MANAGER")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await _create_user(session_factory, "bob@example.com", "Bob Member", "TEAM_MEMBER")


def token_for(user: User) -> str:
    return create_session_token(user.id, user.email, user.role, user.full_name)


@pytest.fixture
def auth_headers(user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def make_notifications(session_factory) -> Callable:
    """
    Insert `count` notifications for a user and return their ids, newest first.

    created_at values are `step` minutes apart (default 1); step=0 gives
    identical timestamps.
    """
    async def _make(user: User, count: int, is_read: bool = False, start: datetime = None, step: int = 1):
        base = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
        async with session_factory() as session:
            rows = [
                Notification(
                    user_id=user.id,
                    title=f"Notification {i}",
                    message=f"Body {i}",
                    type="TASK_ASSIGNED",
                    is_read=is_read,
                    created_at=base + timedelta(minutes=i * step),
                )
                for i in range(count)
            ]
            session.add_all(rows)
            await session.commit()
            return [row.id for row in reversed(rows)]

    return _make
