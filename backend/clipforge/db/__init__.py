"""
Database module for clipforge.

Provides async SQLAlchemy engine with SQLite WAL mode,
session management, and schema initialization.
"""
import logging

from clipforge.db.engine import async_session, engine, shutdown
from clipforge.db.models import Base, PipelineRun, Project, User

logger = logging.getLogger(__name__)


async def init_database(bind=None):
    """Create any missing tables. Safe to call on every startup."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Database schema ensured")


__all__ = [
    "Base",
    "User",
    "Project",
    "PipelineRun",
    "engine",
    "async_session",
    "shutdown",
    "init_database",
]
