"""Database engine, session factory and declarative base."""

from typing import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from seedboard.config import settings

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    """Base declarative class for SQLAlchemy models."""


engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session that commits on success."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Verify the database connection on startup."""
    async with engine.connect() as conn:
        await conn.exec_driver_sql("SELECT 1")
    logger.info("Database connection established")


async def close_db() -> None:
    """Dispose of the connection pool."""
    await engine.dispose()
    logger.info("Database connection closed")


async def create_tables() -> None:
    """Create all tables from model metadata (development databases only)."""
    import seedboard.models  # noqa: F401 - register models on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
