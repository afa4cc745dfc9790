"""
ProjectHub Backend: Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       per-request session dependency.
How:   One engine per process, created at import. Each request gets its own
       AsyncSession that commits when the handler finishes and rolls back if
       an exception escapes.

Connection Pooling (PostgreSQL only):
    pool_size / max_overflow from settings, pool_pre_ping on, connections
    recycled hourly. SQLite URLs (tests, local experiments) use the driver's
    default pool, which rejects these options.
"""

import logging
import time
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from projecthub.config import settings

logger = logging.getLogger(__name__)


def engine_options() -> Dict[str, Any]:
    """Keyword arguments for `create_async_engine` under the current settings."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine & Session Factory ──────────────────────────────────────────────
engine: AsyncEngine = create_async_engine(settings.database_url, **engine_options())

# expire_on_commit=False: attributes stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models; owns the shared metadata."""


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Commits after the handler returns, rolls back and re-raises on any
    exception, and always closes the session.

    Example:
        @router.get("/notifications")
        async def list_notifications(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create any missing tables from the model metadata."""
    # Registers every model on Base.metadata
    import projecthub.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_database(session: AsyncSession) -> float:
    """
    Run `SELECT 1` on `session` and return the round-trip latency in
    milliseconds. Connection errors propagate to the caller.
    """
    started = time.perf_counter()
    await session.execute(text("SELECT 1"))
    return (time.perf_counter() - started) * 1000


async def dispose_engine() -> None:
    """Close every pooled connection. Called on application shutdown."""
    await engine.dispose()
    logger.info("Database engine disposed")
