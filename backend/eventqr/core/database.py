from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool
from typing import AsyncGenerator, Optional, Any, Dict

from eventqr.core.config import settings

# Create base class for models (can be defined before engine)
Base = declarative_base()

# Lazy engine initialization - create on first use to avoid import-time issues
_engine: Optional[AsyncEngine] = None
_async_session_local: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url(db_url: Optional[str] = None) -> str:
    """Get properly formatted async database URL"""
    db_url = db_url or settings.DATABASE_URL
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif db_url.startswith("sqlite:///"):
        db_url = db_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return db_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url: Optional[str] = None, production: Optional[bool] = None) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Connection pooling strategy:
    - SQLite: NullPool, foreign keys switched on per connection (ON DELETE CASCADE)
    - PostgreSQL outside production: NullPool (simpler debugging)
    - PostgreSQL production: queue pool with connection limits

    Connect and command timeouts come from DB_CONNECT_TIMEOUT / DB_COMMAND_TIMEOUT
    so an unreachable store fails instead of hanging the request.
    """
    db_url = get_database_url(db_url)
    if production is None:
        production = settings.is_production

    if "sqlite" in db_url:
        engine = create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False, "timeout": settings.DB_CONNECT_TIMEOUT},
            poolclass=NullPool,
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    connect_args: Dict[str, Any] = {}
    if "asyncpg" in db_url:
        connect_args = {
            "timeout": settings.DB_CONNECT_TIMEOUT,
            "command_timeout": settings.DB_COMMAND_TIMEOUT,
        }

    if not production:
        return create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            connect_args=connect_args,
            poolclass=NullPool,
        )

    return create_async_engine(
        db_url,
        echo=settings.DB_ECHO,
        connect_args=connect_args,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,  # Verify connections before use
    )


def get_engine() -> AsyncEngine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        _engine = build_engine()
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory (lazy initialization)"""
    global _async_session_local
    if _async_session_local is None:
        _async_session_local = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _async_session_local


# Dependency to get DB session
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request. The storage layer commits its own writes."""
    session_factory = get_session_local()
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Database initialization
async def init_db():
    """Create any missing tables"""
    import eventqr.models  # noqa: F401  register models on the metadata

    eng = get_engine()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connection"""
    global _engine, _async_session_local
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_local = None
