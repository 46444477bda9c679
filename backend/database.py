"""
Database engine and sessions for the journal store.

Production runs on MySQL (configured with a pymysql URL, driven through
aiomysql); tests and local runs may point DATABASE_URL at a SQLite file.
"""

from typing import AsyncGenerator
import logging
from models import Base
from config.settings import settings
from sqlalchemy.pool import NullPool
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
import pymysql
pymysql.install_as_MySQLdb()

logger = logging.getLogger(__name__)

# Sync URL prefix -> async driver prefix
_ASYNC_DRIVERS = (
    ('mysql+pymysql://', 'mysql+aiomysql://'),
    ('mysql://', 'mysql+aiomysql://'),
    ('sqlite:///', 'sqlite+aiosqlite:///'),
)


def _convert_to_async_url(url: str) -> str:
    for sync_prefix, async_prefix in _ASYNC_DRIVERS:
        if url.startswith(sync_prefix):
            return async_prefix + url[len(sync_prefix):]
    return url


def _engine_kwargs(url: str) -> dict:
    """Pool settings for server databases; SQLite files get no pooling."""
    if url.startswith('sqlite'):
        return {"poolclass": NullPool}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    }


ASYNC_DATABASE_URL = _convert_to_async_url(settings.DATABASE_URL)

async_engine = create_async_engine(
    ASYNC_DATABASE_URL,
    echo=False,
    **_engine_kwargs(ASYNC_DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request, rolled back if the
    handler raises before committing.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# =============================================================================
# Database Initialization
# =============================================================================

async def init_async_db():
    """Create any missing tables."""
    logger.info("Initializing database (async)...")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")


async def drop_async_db():
    """Drop every table. Used by the test suite between tests."""
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
