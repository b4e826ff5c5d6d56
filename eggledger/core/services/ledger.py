"""
Ledger service.

Applies movements to the daily stock aggregate, runs the day close/reopen
lifecycle, keeps the supplier memory, and mediates every read and write
against the document store.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Generic, TypeVar

from eggledger.config import LedgerSettings, get_logger, get_settings
from eggledger.core.entities.app_settings import AppSettings
from eggledger.core.entities.daily_stock import DailyStock
from eggledger.core.entities.inventory import EggVariant, SubtractResult, WeightedInventory
from eggledger.core.entities.movement import Movement, MovementKind, validate_date_key
from eggledger.core.exceptions import (
    DailyStockNotFoundError,
    DecodeFailureError,
    InvalidInputError,
    PersistenceUnavailableError,
)
from eggledger.core.interfaces.document_store import (
    APP_SETTINGS,
    CARGO_ENTRIES,
    DAILY_STOCKS,
    SETTINGS_KEY,
    IDocumentStore,
    Record,
)
from eggledger.core.records import (
    decode_daily_stock,
    decode_movement,
    decode_settings,
    encode_daily_stock,
    encode_movement,
    encode_settings,
)

logger = get_logger(__name__)

T = TypeVar("T")

_SETTINGS_LOCK = "__settings__"


class KeyedLocks:
    """One asyncio lock per key, dropped as soon as nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


@dataclass
class QueryResult(Generic[T]):
    """Records decoded from a range query plus the count of dropped ones."""

    items: list[T] = field(default_factory=list)
    skipped: int = 0

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class MovementResult:
    """Outcome of recording a movement against today's stock."""

    movement: Movement
    stock: DailyStock
    shortfall: dict[EggVariant, SubtractResult] = field(default_factory=dict)

    @property
    def clamped(self) -> bool:
        return any(result.clamped for result in self.shortfall.values())

    @property
    def shortfall_count(self) -> int:
        return sum(result.shortfall_count for result in self.shortfall.values())


@dataclass
class DayStatistics:
    date: str
    movement_count: int
    unique_suppliers: int


@dataclass
class SupplierTally:
    packages: int = 0
    deliveries: int = 0


class Ledger:
    """
    Orchestrates daily stock mutations and movement history.

    Every read-modify-write of a day's stock runs under a per-date lock, so
    concurrent movements against the same day in this process are applied
    one after the other instead of overwriting each other.
    """

    def __init__(
        self,
        store: IDocumentStore,
        today: Callable[[], date] | None = None,
        settings: LedgerSettings | None = None,
    ) -> None:
        self._store = store
        self._today = today or date.today
        self._settings = settings or get_settings().ledger
        self._locks = KeyedLocks()

    @property
    def system_supplier(self) -> str:
        return self._settings.system_supplier

    def today_key(self) -> str:
        return self._today().isoformat()

    # Daily stock

    async def get_or_create_today(self) -> DailyStock:
        """Load today's stock, creating an empty open current day if absent."""
        date_key = self.today_key()
        async with self._locks.hold(date_key):
            return await self._load_or_create(date_key)

    async def get_stock(self, date_key: str) -> DailyStock | None:
        """Get the stock for one date, or None if that day never existed."""
        validate_date_key(date_key)
        record = await self._store.get_keyed(DAILY_STOCKS, date_key)
        if record is None:
            return None
        return decode_daily_stock(record)

    async def record_movement(
        self,
        kind: MovementKind,
        rosado: WeightedInventory | None = None,
        pardo: WeightedInventory | None = None,
        supplier: str = "",
        notes: str | None = None,
    ) -> MovementResult:
        """
        Append a movement for today and apply it to today's stock.

        Incoming movements add both deltas, outgoing movements subtract them
        with a floor at zero (the clamped amounts are reported back), and
        adjustments are stored as audit entries without touching inventory.

        Raises:
            InvalidInputError: for ``dayClose``, which only ``close_day`` writes
            PersistenceUnavailableError: if the movement or the stock write fails
        """
        try:
            kind = MovementKind(kind)
        except ValueError:
            raise InvalidInputError("kind", "unknown movement kind", kind) from None
        if kind is MovementKind.DAY_CLOSE:
            raise InvalidInputError("kind", "day close movements are written by close_day", kind.value)

        date_key = self.today_key()
        supplier = supplier.strip()
        movement = Movement(
            date=date_key,
            kind=kind,
            supplier=supplier,
            rosado_packages=rosado or WeightedInventory(),
            pardo_packages=pardo or WeightedInventory(),
            notes=notes,
        )

        async with self._locks.hold(date_key):
            stock = await self._load_or_create(date_key)
            if stock.is_closed:
                logger.warning("movement_on_closed_day", date=date_key, kind=kind.value)

            movement = await self._append_movement(movement)

            shortfall: dict[EggVariant, SubtractResult] = {}
            if kind is MovementKind.INCOMING:
                stock.apply_incoming(EggVariant.ROSADO, movement.rosado_packages)
                stock.apply_incoming(EggVariant.PARDO, movement.pardo_packages)
            elif kind is MovementKind.OUTGOING:
                for variant in EggVariant:
                    shortfall[variant] = stock.apply_outgoing(variant, movement.inventory(variant))

            if kind in (MovementKind.INCOMING, MovementKind.OUTGOING):
                await self._save_stock(stock, movement_id=movement.id)

        result = MovementResult(movement=movement, stock=stock, shortfall=shortfall)
        if result.clamped:
            logger.warning(
                "outgoing_clamped",
                date=date_key,
                movement_id=movement.id,
                shortfall=result.shortfall_count,
            )

        if kind is MovementKind.INCOMING:
            await self._learn_supplier(supplier)

        logger.info(
            "movement_recorded",
            date=date_key,
            movement_id=movement.id,
            kind=kind.value,
            packages=movement.total_packages,
            stock_total=stock.total_packages,
        )
        return result

    async def adjust_variant(
        self,
        variant: EggVariant,
        inventory: WeightedInventory,
        notes: str | None = None,
    ) -> MovementResult:
        """Overwrite today's inventory for one variant (manual correction)."""
        try:
            variant = EggVariant(variant)
        except ValueError:
            raise InvalidInputError("variant", "unknown egg variant", variant) from None
        date_key = self.today_key()
        movement = Movement(
            date=date_key,
            kind=MovementKind.ADJUSTMENT,
            supplier=self.system_supplier,
            rosado_packages=inventory if variant is EggVariant.ROSADO else WeightedInventory(),
            pardo_packages=inventory if variant is EggVariant.PARDO else WeightedInventory(),
            notes=notes or self._settings.adjustment_note,
        )

        async with self._locks.hold(date_key):
            stock = await self._load_or_create(date_key)
            movement = await self._append_movement(movement)
            stock.replace_variant(variant, inventory)
            await self._save_stock(stock, movement_id=movement.id)

        logger.info(
            "variant_adjusted",
            date=date_key,
            variant=variant.value,
            packages=inventory.total_count,
        )
        return MovementResult(movement=movement, stock=stock)

    async def close_day(self) -> DailyStock:
        """
        Close today's stock.

        Writes a ``dayClose`` movement snapshotting both inventories under
        the system supplier, then marks the stock closed.

        Raises:
            DailyStockNotFoundError: if today's stock was never created
        """
        date_key = self.today_key()
        async with self._locks.hold(date_key):
            stock = await self.get_stock(date_key)
            if stock is None:
                raise DailyStockNotFoundError(date_key)
            if stock.is_closed:
                logger.warning("day_already_closed", date=date_key, closed_at=str(stock.closed_at))

            snapshot = Movement(
                date=date_key,
                kind=MovementKind.DAY_CLOSE,
                supplier=self.system_supplier,
                rosado_packages=stock.rosado_packages,
                pardo_packages=stock.pardo_packages,
                notes=self._settings.close_day_note,
            )
            snapshot = await self._append_movement(snapshot)

            stock.close()
            await self._save_stock(stock, movement_id=snapshot.id)

        logger.info(
            "day_closed",
            date=date_key,
            movement_id=snapshot.id,
            total_packages=stock.total_packages,
        )
        return stock

    async def reopen_day(self, date_key: str) -> DailyStock:
        """Reopen a closed day; today's stock also becomes the current day."""
        validate_date_key(date_key)
        async with self._locks.hold(date_key):
            stock = await self.get_stock(date_key)
            if stock is None:
                raise DailyStockNotFoundError(date_key)
            stock.reopen(is_today=date_key == self.today_key())
            await self._save_stock(stock)

        logger.info("day_reopened", date=date_key, is_current_day=stock.is_current_day)
        return stock

    # Range queries

    async def stock_history(self) -> QueryResult[DailyStock]:
        """Every stored day, date ascending."""
        records = await self._store.query_all(DAILY_STOCKS, order_by="date")
        return self._decode_all(records, decode_daily_stock, DAILY_STOCKS)

    async def stocks_in_range(self, start: str, end: str) -> QueryResult[DailyStock]:
        """Days within ``[start, end]`` inclusive, date ascending."""
        self._check_range(start, end)
        records = await self._store.query_range(
            DAILY_STOCKS, "date", gte=start, lte=end, order_by="date"
        )
        return self._decode_all(records, decode_daily_stock, DAILY_STOCKS)

    async def movements_for_date(self, date_key: str) -> QueryResult[Movement]:
        """Movements of one date, most recent first."""
        validate_date_key(date_key)
        records = await self._store.query_equals(CARGO_ENTRIES, "date", date_key)
        return self._newest_first(self._decode_all(records, decode_movement, CARGO_ENTRIES))

    async def movements_in_range(self, start: str, end: str) -> QueryResult[Movement]:
        """Movements within ``[start, end]`` inclusive, most recent first."""
        self._check_range(start, end)
        records = await self._store.query_range(
            CARGO_ENTRIES, "date", gte=start, lte=end, order_by="date"
        )
        return self._newest_first(self._decode_all(records, decode_movement, CARGO_ENTRIES))

    async def all_movements(self) -> QueryResult[Movement]:
        records = await self._store.query_all(CARGO_ENTRIES, order_by="timestamp", descending=True)
        return self._newest_first(self._decode_all(records, decode_movement, CARGO_ENTRIES))

    async def day_statistics(self, date_key: str) -> DayStatistics:
        """Movement count and distinct supplier count for one date."""
        movements = await self.movements_for_date(date_key)
        return DayStatistics(
            date=date_key,
            movement_count=len(movements),
            unique_suppliers=len({m.supplier for m in movements}),
        )

    async def supplier_summary(self, date_key: str) -> dict[str, SupplierTally]:
        """Incoming packages and deliveries per supplier for one date."""
        summary: dict[str, SupplierTally] = {}
        for movement in await self.movements_for_date(date_key):
            if not self._is_real_supplier_delivery(movement):
                continue
            tally = summary.setdefault(movement.supplier, SupplierTally())
            tally.packages += movement.total_packages
            tally.deliveries += 1
        return summary

    # Settings and supplier memory

    async def load_settings(self) -> AppSettings:
        """Load the settings document, creating the defaults on first use."""
        async with self._locks.hold(_SETTINGS_LOCK):
            return await self._load_settings()

    async def update_settings(self, settings: AppSettings) -> AppSettings:
        async with self._locks.hold(_SETTINGS_LOCK):
            await self._store.put_keyed(APP_SETTINGS, SETTINGS_KEY, encode_settings(settings))
        logger.info("settings_updated")
        return settings

    async def frequent_suppliers(self) -> list[str]:
        settings = await self.load_settings()
        return list(settings.frequent_suppliers)

    # Internals

    def _is_real_supplier_delivery(self, movement: Movement) -> bool:
        return (
            movement.kind is MovementKind.INCOMING
            and bool(movement.supplier)
            and movement.supplier != self.system_supplier
        )

    async def _load_or_create(self, date_key: str) -> DailyStock:
        # Caller holds the lock for date_key.
        stock = await self.get_stock(date_key)
        if stock is not None:
            return stock

        stock = DailyStock(date=date_key, is_current_day=date_key == self.today_key())
        if stock.is_current_day:
            await self._demote_other_current_days(date_key)
        await self._save_stock(stock)
        logger.info("daily_stock_created", date=date_key, is_current_day=stock.is_current_day)
        return stock

    async def _demote_other_current_days(self, date_key: str) -> None:
        records = await self._store.query_equals(DAILY_STOCKS, "isCurrentDay", True)
        for stock in self._decode_all(records, decode_daily_stock, DAILY_STOCKS):
            if stock.date == date_key:
                continue
            stock.is_current_day = False
            stock.recompute_totals()
            await self._save_stock(stock)
            logger.info("current_day_demoted", date=stock.date)

    async def _append_movement(self, movement: Movement) -> Movement:
        movement_id = await self._store.append_unkeyed(CARGO_ENTRIES, encode_movement(movement))
        return movement.with_id(movement_id)

    async def _save_stock(self, stock: DailyStock, movement_id: str | None = None) -> None:
        try:
            await self._store.put_keyed(DAILY_STOCKS, stock.date, encode_daily_stock(stock))
        except PersistenceUnavailableError:
            # The movement (if any) is already appended; its effect is not.
            logger.error("stock_write_failed", date=stock.date, movement_id=movement_id)
            raise

    async def _load_settings(self) -> AppSettings:
        record = await self._store.get_keyed(APP_SETTINGS, SETTINGS_KEY)
        if record is not None:
            return decode_settings(record)
        settings = AppSettings(current_date=self.today_key())
        await self._store.put_keyed(APP_SETTINGS, SETTINGS_KEY, encode_settings(settings))
        logger.info("settings_created")
        return settings

    async def _learn_supplier(self, name: str) -> None:
        if not name or name == self.system_supplier:
            return
        async with self._locks.hold(_SETTINGS_LOCK):
            settings = await self._load_settings()
            if not settings.remember_supplier(name):
                return
            await self._store.put_keyed(APP_SETTINGS, SETTINGS_KEY, encode_settings(settings))
        logger.info("supplier_learned", supplier=name)

    @staticmethod
    def _check_range(start: str, end: str) -> None:
        validate_date_key(start, "start_date")
        validate_date_key(end, "end_date")
        if start > end:
            raise InvalidInputError("start_date", f"must not be after end_date {end}", start)

    @staticmethod
    def _decode_all(
        records: list[Record],
        decoder: Callable[[Record], T],
        collection: str,
    ) -> QueryResult[T]:
        result: QueryResult[T] = QueryResult()
        for record in records:
            try:
                result.items.append(decoder(record))
            except DecodeFailureError as e:
                result.skipped += 1
                logger.warning(
                    "record_decode_skipped",
                    collection=collection,
                    record_id=e.details.get("record_id"),
                    reason=e.details.get("reason"),
                )
        return result

    @staticmethod
    def _newest_first(result: QueryResult[Movement]) -> QueryResult[Movement]:
        result.items.sort(key=lambda m: m.timestamp, reverse=True)
        return result
