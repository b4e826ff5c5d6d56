"""Pytest fixtures for storage backend tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from eggledger.core.interfaces import IDocumentStore
from eggledger.infrastructure.storage.memory import InMemoryDocumentStore
from eggledger.infrastructure.storage.sqlite import ConnectionPool, SQLiteDocumentStore
from eggledger.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledger.db"


@pytest.fixture
async def sqlite_pool(temp_db_path: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Migrated temporary database behind a small pool."""
    await initialize_database(temp_db_path, create_backup_before=False)
    pool = ConnectionPool(temp_db_path, pool_size=2)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def sqlite_store(sqlite_pool: ConnectionPool) -> SQLiteDocumentStore:
    return SQLiteDocumentStore(pool=sqlite_pool)


@pytest.fixture(params=["memory", "sqlite"])
async def document_store(request, temp_db_path: Path) -> AsyncGenerator[IDocumentStore, None]:
    """Each backend in turn, for behaviour both must share."""
    if request.param == "memory":
        yield InMemoryDocumentStore()
        return

    await initialize_database(temp_db_path, create_backup_before=False)
    pool = ConnectionPool(temp_db_path, pool_size=2)
    await pool.initialize()
    yield SQLiteDocumentStore(pool=pool)
    await pool.close()
