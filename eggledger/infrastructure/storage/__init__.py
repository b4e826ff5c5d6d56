"""Storage infrastructure implementations."""

from eggledger.config import get_settings
from eggledger.core.interfaces import IDocumentStore
from eggledger.infrastructure.storage.memory import InMemoryDocumentStore
from eggledger.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteDocumentStore,
    close_pool,
    get_pool,
)


def get_document_store() -> IDocumentStore:
    """Build the document store selected by ``STORAGE_BACKEND``."""
    if get_settings().storage.backend == "memory":
        return InMemoryDocumentStore()
    return SQLiteDocumentStore()


__all__ = [
    "ConnectionPool",
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
    "close_pool",
    "get_document_store",
    "get_pool",
]
