from typing import AsyncGenerator
import logging
from models import Base
from config.settings import settings
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = {
    'mysql+pymysql://': 'mysql+aiomysql://',
    'mysql://': 'mysql+aiomysql://',
    'sqlite://': 'sqlite+aiosqlite://',
}

MYSQL_POOL_OPTIONS = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 30,
    "pool_recycle": 1800,
    "pool_pre_ping": True,
}


def to_async_url(url: str) -> str:
    """Swap a sync driver prefix for its async counterpart; async URLs pass through."""
    for sync_prefix, async_prefix in ASYNC_DRIVERS.items():
        if url.startswith(sync_prefix):
            return async_prefix + url[len(sync_prefix):]
    return url


def build_engine(url: str):
    url = to_async_url(url)
    # SQLite pools reject the sizing arguments
    options = {} if url.startswith('sqlite') else MYSQL_POOL_OPTIONS
    return create_async_engine(url, echo=False, **options)


async_engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request. Services commit their own writes; anything left
    uncommitted when a handler raises is rolled back here.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_async_db():
    """Create the users and bugs tables if they do not exist yet."""
    logger.info(f"Initializing database ({async_engine.url.get_backend_name()})...")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized successfully")


async def close_async_db():
    await async_engine.dispose()
    logger.info("Database connections closed")
