"""
Database connection and session management.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from lingualink.config import settings
from lingualink.utils.logging import get_logger

logger = get_logger(__name__)

# Create base class for ORM models
Base = declarative_base()


def get_async_database_url(db_url: Optional[str] = None) -> str:
    """Convert database URL to async version if needed."""
    db_url = db_url or settings.database_url

    # Convert postgresql:// to postgresql+asyncpg://
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://")
    # Convert sqlite:// to sqlite+aiosqlite://
    elif db_url.startswith("sqlite://"):
        return db_url.replace("sqlite://", "sqlite+aiosqlite://")

    return db_url


def create_engine(db_url: Optional[str] = None) -> AsyncEngine:
    """Create the async engine for the configured database."""
    url = get_async_database_url(db_url)
    kwargs = {"echo": settings.debug, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=settings.connection_pool_size, max_overflow=10)
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the async session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(session_factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """Yield a session, committing on success and rolling back on error."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning("Database session rolled back", error=str(e))
            raise


async def init_database(engine: AsyncEngine):
    """Initialize database tables."""
    # Register models on the metadata
    from lingualink.models import user, call  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


async def close_database(engine: AsyncEngine):
    """Close database connections."""
    await engine.dispose()
    logger.info("Database connections closed")
