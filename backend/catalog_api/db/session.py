from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from catalog_api.core.config import settings
from catalog_api.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker] = None


def _async_database_url(url: str) -> str:
    # Convert postgresql:// to postgresql+asyncpg:// for async driver
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        database_url = _async_database_url(settings.DATABASE_URL)
        connect_args = {}
        if database_url.startswith("postgresql+asyncpg://"):
            connect_args["statement_cache_size"] = 0
        _engine = create_async_engine(
            database_url,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        logger.info("Database engine initialized")
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _sessionmaker
    if _sessionmaker is None:
        _sessionmaker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _sessionmaker


async def init_models(engine: Optional[AsyncEngine] = None) -> None:
    """Create any missing tables."""
    from catalog_api.db.base import Base
    import catalog_api.models  # noqa: F401  registers the tables on Base.metadata

    async with (engine or get_engine()).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _sessionmaker = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_sessionmaker()() as session:
        yield session
