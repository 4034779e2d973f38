"""Async SQLAlchemy engine and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from review_activity_db.config import get_settings
from review_activity_db.db.models import Base

# Shared engine for the CLI process (initialized lazily)
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None

# Reconciliation and background comment tasks write to the same file
SQLITE_BUSY_TIMEOUT = 30


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create a standalone async engine for the given URL.

    Background comment ingestion uses this to get a connection that is
    independent of the caller's session. SQLite connections wait up to
    ``SQLITE_BUSY_TIMEOUT`` seconds for a competing writer.
    """
    connect_args = {"timeout": SQLITE_BUSY_TIMEOUT} if database_url.startswith("sqlite") else {}
    return create_async_engine(
        database_url,
        echo=echo,
        future=True,
        poolclass=pool.NullPool,  # Required for SQLite to prevent "database is locked"
        connect_args=connect_args,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Get or create the shared async SQLAlchemy engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = build_session_factory(get_engine())
    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session with automatic cleanup.

    Usage:
        async with get_session() as session:
            result = await session.execute(select(PullRequest))
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create all database tables.

    Use this for testing or initial setup. In production, use Alembic migrations.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the shared engine and close all connections."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
