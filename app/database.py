"""
Database Connection Module
Handles the SQLAlchemy async engine and session factory.

PostgreSQL (psycopg) in deployments, SQLite (aiosqlite) for local runs and tests.
"""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pool settings suited to the backend."""
    if database_url.startswith("sqlite"):
        # One connection per checkout; SQLite files don't benefit from pooling
        return create_async_engine(database_url, echo=echo, poolclass=NullPool)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=5,  # Connection pool size
        max_overflow=10,  # Extra connections when pool is full
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,  # Objects remain accessible after commit
    )


_settings = get_settings()

engine: AsyncEngine = build_engine(_settings.database_url, echo=_settings.database_echo)
async_session_maker: async_sessionmaker[AsyncSession] = build_session_maker(engine)


# Base class for all our models
class Base(DeclarativeBase):
    pass


def configure_database(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Rebind the module-level engine and session factory.

    Used by tests and scripts that point the app at a different database
    after import.
    """
    global engine, async_session_maker

    engine = build_engine(database_url, echo=echo)
    async_session_maker = build_session_maker(engine)
    logger.debug(f"Database rebound to {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the current session factory (follows configure_database)."""
    return async_session_maker


async def get_db():
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register models on Base.metadata
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")
