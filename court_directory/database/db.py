"""
Database connection and management using SQLAlchemy async mode.

PostgreSQL (asyncpg) in production; any async SQLAlchemy URL works, e.g.
``sqlite+aiosqlite:///./courts.db`` for local development.
"""

import os
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase
from dotenv import load_dotenv

load_dotenv()


def _default_database_url() -> str:
    """PostgreSQL URL assembled from the POSTGRES_* variables."""
    return "postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}".format(
        user=os.getenv("POSTGRES_USER", "courts"),
        password=os.getenv("POSTGRES_PASSWORD", "courts"),
        host=os.getenv("POSTGRES_HOST", "localhost"),
        port=os.getenv("POSTGRES_PORT", "5432"),
        name=os.getenv("POSTGRES_DB", "courts"),
    )


DATABASE_URL = os.getenv("DATABASE_URL") or _default_database_url()


def _engine_options(url: str) -> dict:
    """Pool settings for the given URL (SQLite does not take pool sizing)."""
    options = {
        "echo": os.getenv("SQL_ECHO", "false").lower() == "true",
        "future": True,
        "pool_pre_ping": True,
    }
    if not url.startswith("sqlite"):
        options.update(pool_size=10, max_overflow=20)
    return options


engine: AsyncEngine = create_async_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# Registers the court tables on Base.metadata
from court_directory.database import models  # noqa: F401, E402


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: committed on success, rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_database():
    """Create the court tables and indexes that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)


async def close_database():
    """Dispose of the engine's connection pool."""
    await engine.dispose()
