"""Abstract interface for the keyed document persistence collaborator."""

from abc import ABC, abstractmethod
from typing import Any

Record = dict[str, Any]

# Collection names shared by every backend
DAILY_STOCKS = "daily_stocks"
CARGO_ENTRIES = "cargo_entries"
APP_SETTINGS = "app_settings"
SETTINGS_KEY = "main"


class IDocumentStore(ABC):
    """
    Interface for keyed JSON-like documents grouped in collections.

    Returned records always carry their key (or generated id) under ``"id"``.
    Implementations raise ``PersistenceUnavailableError`` when the backend
    fails; they never interpret record contents.
    """

    @abstractmethod
    async def put_keyed(self, collection: str, key: str, record: Record) -> None:
        """Create or overwrite the record stored under ``key``."""
        pass

    @abstractmethod
    async def get_keyed(self, collection: str, key: str) -> Record | None:
        """Get the record stored under ``key``, or None."""
        pass

    @abstractmethod
    async def append_unkeyed(self, collection: str, record: Record) -> str:
        """Store a new record under a generated id and return the id."""
        pass

    @abstractmethod
    async def query_range(
        self,
        collection: str,
        field: str,
        gte: Any,
        lte: Any,
        order_by: str,
    ) -> list[Record]:
        """Records with ``gte <= record[field] <= lte``, ascending by ``order_by``."""
        pass

    @abstractmethod
    async def query_equals(self, collection: str, field: str, value: Any) -> list[Record]:
        """Records with ``record[field] == value`` in insertion order."""
        pass

    @abstractmethod
    async def query_all(
        self, collection: str, order_by: str, descending: bool = False
    ) -> list[Record]:
        """All records of a collection ordered by ``order_by``."""
        pass
