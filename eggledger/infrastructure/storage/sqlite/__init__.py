"""SQLite storage implementations."""

from eggledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from eggledger.infrastructure.storage.sqlite.document_store import SQLiteDocumentStore

__all__ = [
    "ConnectionPool",
    "SQLiteDocumentStore",
    "close_pool",
    "get_pool",
]
