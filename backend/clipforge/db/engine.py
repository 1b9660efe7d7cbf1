"""
Database engine configuration for clipforge.

Provides async SQLAlchemy engine with SQLite WAL mode,
crash-safe PRAGMA configuration, and the session factory.
"""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from clipforge.config import settings


def configure_sqlite_pragmas(dbapi_conn, connection_record):
    """
    Configure SQLite PRAGMA settings for crash safety and performance.

    - WAL mode: status polling reads while the pipeline writes
    - FULL synchronous: terminal status writes survive a crash
    - Foreign keys: projects must reference an existing user
    - Busy timeout: Wait up to 5s for locks
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=FULL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine, registering SQLite pragmas when applicable.

    SQLite connections are not pooled: background pipeline tasks and the
    request handlers may run on different event loops (TestClient, CLI).
    """
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        new_engine = create_async_engine(database_url, echo=False, poolclass=NullPool)
    else:
        new_engine = create_async_engine(database_url, echo=False)
    if is_sqlite:
        # CRITICAL: Use engine.sync_engine for aiosqlite compatibility
        event.listens_for(new_engine.sync_engine, "connect")(configure_sqlite_pragmas)
    return new_engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps loaded projects usable after commit
    return async_sessionmaker(bind, expire_on_commit=False, class_=AsyncSession)


engine = build_engine(settings.storage.database_url)

async_session = build_session_factory(engine)


async def shutdown():
    """Dispose of engine and close all connections."""
    await engine.dispose()
