from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator
import logging

from .config import settings

logger = logging.getLogger(__name__)

# ============================================================
# Async Database Engine
# ============================================================

def parse_database_url(url: str) -> tuple[str, dict]:
    """
    Parse database URL and extract SSL settings for asyncpg.
    Returns: (clean_url, ssl_settings)

    SQLite URLs are returned untouched with no SSL settings.
    """
    if url.startswith("sqlite"):
        return url, {}

    # Remove sslmode and channel_binding from URL
    clean_url = url.split('?')[0]  # Get base URL without query params

    # Convert to asyncpg format
    clean_url = clean_url.replace(
        'postgresql+psycopg2://',
        'postgresql+asyncpg://'
    ).replace(
        'postgresql://',
        'postgresql+asyncpg://'
    )

    # Extract SSL settings from original URL
    ssl_settings = {}
    if 'sslmode' in url:
        ssl_settings['ssl'] = 'require'

    return clean_url, ssl_settings


def build_engine_options(url: str, ssl_config: dict) -> dict:
    """Engine keyword arguments for the configured backend"""
    if url.startswith("sqlite"):
        # aiosqlite opens one file handle per connection, no pooling needed
        return {
            "echo": settings.DB_ECHO,
            "poolclass": NullPool,
        }

    return {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "connect_args": {
            "server_settings": {
                "application_name": "rapphim_api",
                "jit": "off",
            },
            "command_timeout": 60,
            "timeout": 10,
            **ssl_config,
        },
    }


ASYNC_DATABASE_URL, ssl_config = parse_database_url(settings.DATABASE_URL)

async_engine = create_async_engine(
    ASYNC_DATABASE_URL,
    **build_engine_options(ASYNC_DATABASE_URL, ssl_config),
)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Don't expire objects after commit
    autoflush=False,
)

# ============================================================
# Base Model
# ============================================================

Base = declarative_base()

# ============================================================
# Database Session Dependencies
# ============================================================

async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Async database session dependency for FastAPI endpoints.

    Usage:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_async_db)):
            result = await db.execute(select(Item))
            return result.scalars().all()

    The session is closed after the request. Endpoints that write
    commit explicitly.
    """
    session = AsyncSessionLocal()
    try:
        yield session
    finally:
        await session.close()


def get_session_factory() -> async_sessionmaker:
    """
    Session factory dependency for work that outlives the request session
    (background tasks open their own session from it).
    """
    return AsyncSessionLocal

# ============================================================
# Database Health Check
# ============================================================

async def check_db_health() -> bool:
    """
    Check if database is accessible and responsive.
    Returns True if healthy, False otherwise.
    """
    session = AsyncSessionLocal()
    try:
        await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
    finally:
        await session.close()


async def get_db_stats() -> dict:
    """
    Get database connection pool statistics.
    """
    pool = async_engine.pool
    if isinstance(pool, NullPool):
        return {"async_pool": {"class": "NullPool"}}

    return {
        "async_pool": {
            "size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
            "total": pool.size() + pool.overflow(),
        }
    }

# ============================================================
# Connection Event Listeners
# ============================================================

@event.listens_for(async_engine.sync_engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """Log database connections"""
    logger.debug("Database connection established")

# ============================================================
# Startup/Shutdown Handlers
# ============================================================

async def init_db():
    try:
        logger.info("🔄 Checking database connection...")

        # just verify connectivity, schema is owned by alembic
        is_healthy = await check_db_health()
        if is_healthy:
            logger.info("✅ Database health check passed")
        else:
            logger.error("❌ Database health check failed")

    except Exception as e:
        logger.error(f"❌ Database init failed: {e}", exc_info=True)
        raise


async def create_all():
    """Create every registered table (development and seeding only)"""
    from . import models  # noqa: F401  registers tables on Base.metadata

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all():
    """Drop every registered table"""
    from . import models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def close_db():
    """
    Close database connections on shutdown.
    """
    try:
        logger.info("🔄 Closing database connections...")
        await async_engine.dispose()
        logger.info("✅ Database connections closed")
    except Exception as e:
        logger.error(f"❌ Error closing database: {e}")


__all__ = [
    'Base',
    'async_engine',
    'AsyncSessionLocal',
    'get_async_db',
    'get_session_factory',
    'check_db_health',
    'get_db_stats',
    'init_db',
    'create_all',
    'drop_all',
    'close_db',
]
