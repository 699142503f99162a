"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from userapi.config import settings
from userapi.logger import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def _engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.debug}
    if settings.is_sqlite:
        # SQLite pools do not accept sizing arguments
        return options
    options.update(
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,  # Max persistent connections
        max_overflow=settings.db_max_overflow,  # Additional transient connections under load
        pool_recycle=settings.db_pool_recycle,
    )
    return options


engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Test hook to override session maker
_test_session_maker = None


def set_test_session_maker(
    maker: async_sessionmaker[AsyncSession] | None,
) -> async_sessionmaker[AsyncSession] | None:
    """Set test session maker and return the previous value."""
    global _test_session_maker
    previous = _test_session_maker
    _test_session_maker = maker
    return previous


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session.

    The session holds one pooled connection for the duration of the request
    and hands it back on every exit path.
    """
    maker = _test_session_maker or async_session_maker
    async with maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """Create tables when AUTO_CREATE_SCHEMA is set.

    In deployed environments the ``users`` table is provisioned externally and
    this is a no-op apart from logging.
    """
    if not settings.auto_create_schema:
        logger.info("Database initialized (schema provisioned externally)")
        return

    # Register models on the metadata before create_all
    from userapi import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema created", tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
