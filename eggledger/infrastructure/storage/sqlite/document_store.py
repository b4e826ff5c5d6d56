"""
SQLite implementation of the keyed document store.

Every collection lives in the single ``documents`` table; record bodies are
stored as JSON and filtered with ``json_extract``.
"""

import json
import re
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from eggledger.config import get_logger
from eggledger.core.exceptions import InvalidInputError, PersistenceUnavailableError
from eggledger.core.interfaces import IDocumentStore, Record
from eggledger.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool

logger = get_logger(__name__)

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Corrupt bodies yield NULL instead of aborting the whole statement
_FIELD_SQL = "CASE WHEN json_valid(data_json) THEN json_extract(data_json, ?) END"


def _json_path(field: str) -> str:
    if not _FIELD_NAME.match(field):
        raise InvalidInputError("field", "not a valid document field name", field)
    return f"$.{field}"


class SQLiteDocumentStore(IDocumentStore):
    """SQLite implementation of document storage."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        return self._pool or await get_pool()

    @asynccontextmanager
    async def _connection(
        self, operation: str, collection: str, write: bool = False
    ) -> AsyncIterator[aiosqlite.Connection]:
        pool = await self._get_pool()
        try:
            async with pool.transaction() if write else pool.acquire() as conn:
                yield conn
        except aiosqlite.Error as e:
            logger.error("document_store_error", operation=operation, collection=collection, error=str(e))
            raise PersistenceUnavailableError(operation, str(e), collection) from e

    async def put_keyed(self, collection: str, key: str, record: Record) -> None:
        body = {k: v for k, v in record.items() if k != "id"}
        async with self._connection("put", collection, write=True) as conn:
            await conn.execute(
                """
                INSERT INTO documents (collection, key, data_json) VALUES (?, ?, ?)
                ON CONFLICT (collection, key) DO UPDATE SET
                    data_json = excluded.data_json,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (collection, key, json.dumps(body)),
            )
        logger.debug("document_put", collection=collection, key=key)

    async def get_keyed(self, collection: str, key: str) -> Record | None:
        async with self._connection("get", collection) as conn:
            cursor = await conn.execute(
                "SELECT key, data_json FROM documents WHERE collection = ? AND key = ?",
                (collection, key),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    async def append_unkeyed(self, collection: str, record: Record) -> str:
        key = uuid.uuid4().hex
        body = {k: v for k, v in record.items() if k != "id"}
        async with self._connection("append", collection, write=True) as conn:
            await conn.execute(
                "INSERT INTO documents (collection, key, data_json) VALUES (?, ?, ?)",
                (collection, key, json.dumps(body)),
            )
        logger.debug("document_appended", collection=collection, key=key)
        return key

    async def query_range(
        self,
        collection: str,
        field: str,
        gte: Any,
        lte: Any,
        order_by: str,
    ) -> list[Record]:
        path = _json_path(field)
        order_path = _json_path(order_by)
        async with self._connection("query_range", collection) as conn:
            cursor = await conn.execute(
                f"""
                SELECT key, data_json FROM documents
                WHERE collection = ?
                  AND {_FIELD_SQL} >= ?
                  AND {_FIELD_SQL} <= ?
                ORDER BY {_FIELD_SQL}, seq
                """,
                (collection, path, gte, path, lte, order_path),
            )
            rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def query_equals(self, collection: str, field: str, value: Any) -> list[Record]:
        path = _json_path(field)
        async with self._connection("query_equals", collection) as conn:
            cursor = await conn.execute(
                f"""
                SELECT key, data_json FROM documents
                WHERE collection = ? AND {_FIELD_SQL} = ?
                ORDER BY seq
                """,
                (collection, path, value),
            )
            rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    async def query_all(
        self, collection: str, order_by: str, descending: bool = False
    ) -> list[Record]:
        order_path = _json_path(order_by)
        direction = "DESC" if descending else "ASC"
        async with self._connection("query_all", collection) as conn:
            cursor = await conn.execute(
                f"""
                SELECT key, data_json FROM documents
                WHERE collection = ?
                ORDER BY {_FIELD_SQL} {direction}, seq {direction}
                """,
                (collection, order_path),
            )
            rows = await cursor.fetchall()
        return [self._row_to_record(row) for row in rows]

    def _row_to_record(self, row: aiosqlite.Row) -> Record:
        """Decode the stored JSON body; a corrupt body is left for the decoder to reject."""
        try:
            record = json.loads(row["data_json"])
        except json.JSONDecodeError:
            record = {"_raw": row["data_json"]}
        if not isinstance(record, dict):
            record = {"_raw": record}
        record["id"] = row["key"]
        return record
