"""
ArchLens Backend - Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, FastAPI session dependency,
       and the idempotent `connect_to_database` probe.
Why:   Keeps all connection logic in one place; routes and services only ever
       see an `AsyncSession`.
How:   The engine owns the connection pool. Each request gets its own session
       that commits on success and rolls back on error.

Connection Pooling:
    pool_size / max_overflow come from settings (defaults 20 / 10).
    pool_pre_ping validates connections before use; pool_recycle=3600 drops
    connections older than an hour.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from archlens.config import settings
from archlens.exceptions import DatabaseError

logger = logging.getLogger(__name__)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=3600,
    echo=settings.log_level == "DEBUG",
)

# expire_on_commit=False: attributes stay readable after the commit in
# get_db_session, when the response is serialized.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for --autogenerate.
    """
    pass


# ── Connection Probe ──────────────────────────────────────────────────────
_connected = False


async def ping_database() -> None:
    """Run `SELECT 1` on a pooled connection. Driver errors propagate."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def connect_to_database() -> None:
    """
    Ensure the analysis store is reachable.

    What:    Runs `SELECT 1` the first time it is called and remembers success.
    Who:     Awaited by handlers before their first query.
    When:    Every call after the first successful one returns immediately.

    Raises:
        DatabaseError: DATABASE_URL is empty, or the probe query failed.
            A failed probe is not remembered, so the next call retries.
    """
    global _connected
    if _connected:
        return

    if not settings.database_url:
        raise DatabaseError(message="DATABASE_URL environment variable is not defined")

    try:
        await ping_database()
    except Exception as e:
        logger.error("Database connection error: %s", str(e))
        raise DatabaseError(
            message="Could not connect to the database",
            context={"error_type": type(e).__name__},
        ) from e

    _connected = True
    logger.info("Connected to database")


def reset_connection_state() -> None:
    """Forget a previous successful probe (used after dispose and in tests)."""
    global _connected
    _connected = False


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the exception handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/analyses")
        async def list_analyses(db: AsyncSession = Depends(get_db_session)):
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
async def dispose_engine() -> None:
    """
    Gracefully closes all connections in the pool.

    Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
    reset_connection_state()
