"""
Pooled aiosqlite connections for the ledger database.

A fixed set of connections is opened once and lent out through a queue;
``transaction()`` wraps a loan in commit/rollback.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from eggledger.config import get_logger, get_settings
from eggledger.config.settings import StorageSettings
from eggledger.core.exceptions import PersistenceUnavailableError

logger = get_logger(__name__)

# Applied to every new connection; busy_timeout is appended per pool
_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
)


class ConnectionPool:
    """Fixed-size pool of connections to one SQLite file."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = Path(db_path)
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, storage: StorageSettings) -> "ConnectionPool":
        return cls(storage.db_path, pool_size=storage.pool_size, busy_timeout=storage.busy_timeout)

    async def initialize(self) -> None:
        """Open every pooled connection. Safe to call more than once."""
        async with self._lock:
            if self._initialized:
                return
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                while len(self._connections) < self.pool_size:
                    conn = await self._open()
                    self._connections.append(conn)
                    self._idle.put_nowait(conn)
            except aiosqlite.Error as e:
                logger.error("connection_pool_failed", db_path=str(self.db_path), error=str(e))
                await self._close_all()
                raise PersistenceUnavailableError("connect", str(e)) from e
            self._initialized = True
        logger.info("connection_pool_initialized", db_path=str(self.db_path), pool_size=self.pool_size)

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        for pragma in (*_PRAGMAS, f"PRAGMA busy_timeout={self.busy_timeout}"):
            await conn.execute(pragma)
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; the pool opens itself on first use."""
        if not self._initialized:
            await self.initialize()
        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection whose work is committed only if the block succeeds."""
        async with self.acquire() as conn:
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def _close_all(self) -> None:
        for conn in self._connections:
            await conn.close()
        self._connections.clear()
        self._idle = asyncio.Queue(maxsize=self.pool_size)

    async def close(self) -> None:
        async with self._lock:
            await self._close_all()
            self._initialized = False
        logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Shared pool for the configured database file."""
    global _pool
    if _pool is None:
        _pool = ConnectionPool.from_settings(get_settings().storage)
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
