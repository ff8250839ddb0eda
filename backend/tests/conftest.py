"""Root conftest — shared test configuration and store fixtures.

Invariants:
    - Environment set before any oneclick module reads settings
    - Every test gets a fresh in-memory SQLite database (tables + partial indexes)

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the partial unique index is
      created with sqlite_where so uniqueness races are exercised for real
    - StaticPool: every session shares the single in-memory connection
"""

import os

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

# Ensure tests don't accidentally use real credentials
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("BASE_URL", "https://pay.example.com/api/")
os.environ.setdefault("TBK_SUCCESS_URL", "https://shop.example.com/card/ok")
os.environ.setdefault("TBK_FAILED_URL", "https://shop.example.com/card/failed")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-passphrase")
os.environ.setdefault("TBK_CODE", "")
os.environ.setdefault("TBK_KEY", "")

from oneclick.config import Settings  # noqa: E402
from oneclick.db.base import Base  # noqa: E402
from oneclick.infrastructure.database import DatabaseSessionManager  # noqa: E402
from oneclick.infrastructure.document_store import SqlDocumentStore  # noqa: E402
import oneclick.models  # noqa: E402,F401


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        api_key="test-api-key",
        base_url="https://pay.example.com/api/",
        tbk_success_url="https://shop.example.com/card/ok",
        tbk_failed_url="https://shop.example.com/card/failed",
        encryption_key="test-encryption-passphrase",
        tbk_code="",
        tbk_key="",
    )


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def store(db_manager):
    return SqlDocumentStore(db_manager)
