"""In-process document store, used by tests and the ``memory`` backend."""

import asyncio
import copy
import uuid
from typing import Any

from eggledger.config import get_logger
from eggledger.core.interfaces import IDocumentStore, Record

logger = get_logger(__name__)


def _sort_key(field: str):
    # Records missing the field sort first
    def key(record: Record) -> tuple[bool, Any]:
        value = record.get(field)
        return (value is not None, value if value is not None else 0)

    return key


class InMemoryDocumentStore(IDocumentStore):
    """Collections of deep-copied dicts; insertion order is preserved."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Record]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, Record]:
        return self._collections.setdefault(name, {})

    @staticmethod
    def _out(key: str, record: Record) -> Record:
        result = copy.deepcopy(record)
        result["id"] = key
        return result

    async def put_keyed(self, collection: str, key: str, record: Record) -> None:
        body = {k: v for k, v in record.items() if k != "id"}
        async with self._lock:
            self._collection(collection)[key] = copy.deepcopy(body)

    async def get_keyed(self, collection: str, key: str) -> Record | None:
        record = self._collection(collection).get(key)
        return None if record is None else self._out(key, record)

    async def append_unkeyed(self, collection: str, record: Record) -> str:
        key = uuid.uuid4().hex
        await self.put_keyed(collection, key, record)
        return key

    async def query_range(
        self,
        collection: str,
        field: str,
        gte: Any,
        lte: Any,
        order_by: str,
    ) -> list[Record]:
        matches = [
            self._out(key, record)
            for key, record in self._collection(collection).items()
            if record.get(field) is not None and gte <= record[field] <= lte
        ]
        return sorted(matches, key=_sort_key(order_by))

    async def query_equals(self, collection: str, field: str, value: Any) -> list[Record]:
        return [
            self._out(key, record)
            for key, record in self._collection(collection).items()
            if field in record and record[field] == value
        ]

    async def query_all(
        self, collection: str, order_by: str, descending: bool = False
    ) -> list[Record]:
        records = [self._out(key, record) for key, record in self._collection(collection).items()]
        return sorted(records, key=_sort_key(order_by), reverse=descending)

    def clear(self) -> None:
        self._collections.clear()
        logger.debug("memory_store_cleared")
