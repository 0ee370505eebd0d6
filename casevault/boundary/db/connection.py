"""
Database connection management.

Provides the async SQLAlchemy engine, session factory, FastAPI dependency
for request-scoped sessions, and schema bootstrap.

Dependencies: sqlalchemy, casevault.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from casevault.boundary.db.base import Base
from casevault.configs import get_settings


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create the process-wide async engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect
    stale/broken connections early.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails
    """
    db_config = get_settings().database

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Build a session factory bound to ``engine``.

    Sessions use autoflush=False and expire_on_commit=False so ORM rows
    stay readable after commit in response serialization.
    """
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the process-wide engine.

    Background jobs (case analysis) open their own sessions through this
    factory rather than borrowing a request session.

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return create_session_factory(get_async_engine())


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection with automatic cleanup.

    Yields:
        AsyncSession: Async SQLAlchemy session scoped to the request

    Usage:
        @router.get("/cases/{case_id}")
        async def get_case(case_id: UUID, db: AsyncSession = Depends(get_async_db)):
            return await case_crud.get_by_id(db, case_id)
    """
    SessionFactory = get_async_session_factory()
    async with SessionFactory() as session:
        yield session


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on ``Base.metadata`` (no-op for existing ones)."""
    # Import models so they register on the metadata
    from casevault.boundary.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close pooled connections of the process-wide engine."""
    if get_async_engine.cache_info().currsize:
        await get_async_engine().dispose()
