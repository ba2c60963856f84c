"""
Database session management.

This module provides utilities for creating and managing database sessions
using async SQLAlchemy with PostgreSQL (asyncpg) or SQLite (aiosqlite).
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.config import settings
from app.core.logging import logger


def _engine_options() -> dict:
    """Build engine keyword arguments for the configured backend."""
    if settings.database.is_sqlite:
        # One connection per session; SQLite serialises writers on its file lock
        return {
            "poolclass": NullPool,
            "connect_args": {"timeout": 30},
        }
    return {
        "pool_size": settings.database.pool_size,
        "max_overflow": settings.database.max_overflow,
        "pool_pre_ping": True,
        "pool_recycle": settings.database.pool_recycle,
    }


# Create async engine
engine = create_async_engine(
    settings.database.url,
    echo=settings.debug,
    **_engine_options(),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    This function is used as a dependency in FastAPI endpoints to provide
    a database session. Any exception escaping the endpoint rolls back
    whatever the request left uncommitted.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()
