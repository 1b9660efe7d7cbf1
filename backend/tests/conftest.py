"""Shared fixtures: an isolated database and media directory per session.

Environment overrides must be in place before clipforge.config is imported,
since settings and the database engine are module singletons.
"""

import os
import tempfile
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="clipforge-tests-"))
DB_PATH = _TMP_DIR / "clipforge-test.db"

os.environ["CLIPFORGE_ENVIRONMENT"] = "development"
os.environ["CLIPFORGE_STORAGE__DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["CLIPFORGE_STORAGE__MEDIA_DIR"] = str(_TMP_DIR / "media")
os.environ["CLIPFORGE_AUTH__BCRYPT_ROUNDS"] = "4"
os.environ["CLIPFORGE_PIPELINE__FAIL_ORPHANED_ON_STARTUP"] = "true"

import pytest
import pytest_asyncio

from clipforge.config import Settings
from clipforge.db import async_session, init_database
from clipforge.orchestrator.pipeline import ContentPipeline

from fakes import make_capabilities


def reset_database_files():
    for suffix in ("", "-wal", "-shm", "-journal"):
        Path(f"{DB_PATH}{suffix}").unlink(missing_ok=True)


@pytest.fixture
def fast_settings():
    """Settings with a zero poll interval and a small poll budget."""
    return Settings(
        render={"poll_interval": 0, "poll_max_attempts": 3},
        pipeline={"tts_max_chars": 4096},
    )


@pytest.fixture
def capabilities():
    return make_capabilities()


@pytest.fixture
def pipeline(capabilities, fast_settings):
    return ContentPipeline(capabilities, fast_settings)


@pytest_asyncio.fixture
async def db_session():
    reset_database_files()
    await init_database()
    async with async_session() as session:
        yield session
