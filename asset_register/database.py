"""
Database connection and session management for the Asset Register.
"""

import logging
import os
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

# Get database URL from environment variable
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite+aiosqlite:///./asset_register.db"
)

DATABASE_ECHO = os.getenv("DATABASE_ECHO", "").lower() in ("1", "true", "yes")


def create_engine_for(url: str, echo: bool = False):
    """
    Create an async engine for the given URL.

    SQLite connections are not shared across event loops, so SQLite engines
    open a fresh connection per session.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo, future=True, poolclass=NullPool)
    return create_async_engine(
        url,
        echo=echo,
        future=True,
        pool_pre_ping=True,  # Verify connections before using
    )


def create_session_maker(bind) -> sessionmaker:
    return sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Create async engine
engine = create_engine_for(DATABASE_URL, echo=DATABASE_ECHO)

# Create async session maker
async_session = create_session_maker(engine)


async def init_db(bind=None):
    """
    Initialize database tables.
    Creates all tables defined in SQLModel models.
    """
    # Register the table on SQLModel.metadata
    from asset_register import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("✓ Database tables ready")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI to get database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
