"""Tests for the Ledger service."""

import asyncio
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from eggledger.core.entities import EggVariant, Movement, MovementKind, WeightedInventory
from eggledger.core.exceptions import (
    DailyStockNotFoundError,
    DecodeFailureError,
    InvalidInputError,
    PersistenceUnavailableError,
)
from eggledger.core.records import encode_movement
from eggledger.core.services import Ledger
from eggledger.core.services.ledger import KeyedLocks


def packages(weight: int, count: int, tenth: int = 0) -> WeightedInventory:
    counters = [0] * 10
    counters[tenth] = count
    return WeightedInventory.from_classes({weight: counters})


class TestDailyStockLifecycle:
    async def test_get_or_create_today_is_stable(self, ledger: Ledger, store):
        first = await ledger.get_or_create_today()
        second = await ledger.get_or_create_today()

        assert first.date == "2024-03-15"
        assert first.is_current_day is True
        assert first.is_closed is False
        assert second.created_at == first.created_at
        assert len(await store.query_all("daily_stocks", order_by="date")) == 1

    async def test_get_stock_missing_returns_none(self, ledger: Ledger):
        assert await ledger.get_stock("2024-03-01") is None

    async def test_get_stock_rejects_bad_date(self, ledger: Ledger):
        with pytest.raises(InvalidInputError):
            await ledger.get_stock("15/03/2024")

    async def test_new_day_demotes_previous_current_day(self, ledger: Ledger, clock):
        await ledger.get_or_create_today()
        clock.today = date(2024, 3, 16)

        today = await ledger.get_or_create_today()
        yesterday = await ledger.get_stock("2024-03-15")

        assert today.is_current_day is True
        assert yesterday.is_current_day is False

    async def test_receive_sell_close_reopen(self, ledger: Ledger):
        received = await ledger.record_movement(
            MovementKind.INCOMING, rosado=packages(7, 5), supplier="Farm1"
        )
        assert received.stock.total_packages == 5
        assert received.stock.total_weight == 35.0

        sold = await ledger.record_movement(
            MovementKind.OUTGOING, rosado=packages(7, 3), supplier="Shop"
        )
        assert sold.clamped is False
        assert sold.stock.rosado_packages.packages_for_class(7)[0] == 2

        closed = await ledger.close_day()
        assert closed.is_closed is True
        assert closed.is_current_day is False
        assert closed.closed_at is not None

        movements = await ledger.movements_for_date("2024-03-15")
        snapshot = next(m for m in movements if m.kind is MovementKind.DAY_CLOSE)
        assert snapshot.supplier == "Sistema"
        assert snapshot.rosado_packages.total_count == 2
        assert snapshot.pardo_packages.total_count == 0

        reopened = await ledger.reopen_day("2024-03-15")
        assert reopened.is_closed is False
        assert reopened.closed_at is None
        assert reopened.is_current_day is True

    async def test_reopen_past_day_stays_non_current(self, ledger: Ledger, clock):
        await ledger.get_or_create_today()
        await ledger.close_day()
        clock.today = date(2024, 3, 16)

        reopened = await ledger.reopen_day("2024-03-15")
        assert reopened.is_closed is False
        assert reopened.is_current_day is False

    async def test_close_day_without_stock(self, ledger: Ledger):
        with pytest.raises(DailyStockNotFoundError) as exc_info:
            await ledger.close_day()
        assert exc_info.value.code == "DAILY_STOCK_NOT_FOUND"

    async def test_reopen_missing_day(self, ledger: Ledger):
        with pytest.raises(DailyStockNotFoundError):
            await ledger.reopen_day("2024-01-01")

    async def test_movement_on_closed_day_still_applies(self, ledger: Ledger):
        await ledger.get_or_create_today()
        await ledger.close_day()

        result = await ledger.record_movement(MovementKind.INCOMING, pardo=packages(9, 4), supplier="Farm1")
        assert result.stock.is_closed is True
        assert result.stock.total_packages == 4


class TestRecordMovement:
    async def test_outgoing_is_clamped_at_zero(self, ledger: Ledger):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(8, 2), supplier="Farm1")

        result = await ledger.record_movement(MovementKind.OUTGOING, rosado=packages(8, 10))

        assert result.clamped is True
        assert result.shortfall_count == 8
        assert result.shortfall[EggVariant.ROSADO].shortfall.packages_for_class(8)[0] == 8
        assert result.stock.total_packages == 0
        # The movement keeps the requested amount
        assert result.movement.total_packages == 10

    async def test_tenths_buckets_are_independent(self, ledger: Ledger):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(10, 3, tenth=5), supplier="Farm1")

        result = await ledger.record_movement(MovementKind.OUTGOING, rosado=packages(10, 3, tenth=4))

        assert result.clamped is True
        assert result.stock.rosado_packages.packages_for_class(10)[5] == 3

    async def test_adjustment_movement_leaves_inventory(self, ledger: Ledger):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 5), supplier="Farm1")

        result = await ledger.record_movement(
            MovementKind.ADJUSTMENT, rosado=packages(7, 100), notes="audit"
        )

        assert result.movement.kind is MovementKind.ADJUSTMENT
        assert result.stock.total_packages == 5
        stored = await ledger.get_stock("2024-03-15")
        assert stored.total_packages == 5

    async def test_day_close_kind_rejected(self, ledger: Ledger):
        with pytest.raises(InvalidInputError):
            await ledger.record_movement(MovementKind.DAY_CLOSE)

    async def test_unknown_kind_rejected(self, ledger: Ledger):
        with pytest.raises(InvalidInputError) as exc_info:
            await ledger.record_movement("bogus")
        assert exc_info.value.details["field"] == "kind"

    async def test_movement_gets_store_id(self, ledger: Ledger):
        result = await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 1), supplier="Farm1")
        assert result.movement.id
        assert result.movement.date == "2024-03-15"

    async def test_concurrent_movements_all_applied(self, ledger: Ledger):
        await asyncio.gather(
            *[
                ledger.record_movement(MovementKind.INCOMING, pardo=packages(11, 1), supplier="Farm1")
                for _ in range(10)
            ]
        )
        stock = await ledger.get_stock("2024-03-15")
        assert stock.pardo_packages.total_for_class(11) == 10
        assert len(await ledger.movements_for_date("2024-03-15")) == 10

    async def test_supplier_name_is_trimmed(self, ledger: Ledger):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 2), supplier="Farm2")
        result = await ledger.record_movement(
            MovementKind.INCOMING, rosado=packages(7, 3), supplier=" Farm2 "
        )

        assert result.movement.supplier == "Farm2"
        summary = await ledger.supplier_summary("2024-03-15")
        assert list(summary) == ["Farm2"]
        assert summary["Farm2"].packages == 5
        assert summary["Farm2"].deliveries == 2

    async def test_date_locks_are_released(self, ledger: Ledger, clock):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 1), supplier="Farm1")
        await ledger.close_day()
        await ledger.reopen_day("2024-03-15")
        for day in ("2024-03-10", "2024-03-11", "2024-03-12"):
            with pytest.raises(DailyStockNotFoundError):
                await ledger.reopen_day(day)

        assert len(ledger._locks) == 0

    async def test_stock_write_failure_propagates(self, clock, ledger_settings):
        store = AsyncMock()
        store.get_keyed.return_value = None
        store.query_equals.return_value = []
        store.append_unkeyed.return_value = "m1"
        store.put_keyed.side_effect = [
            None,
            PersistenceUnavailableError("put", "disk I/O error", "daily_stocks"),
        ]
        ledger = Ledger(store, today=clock, settings=ledger_settings)

        with pytest.raises(PersistenceUnavailableError):
            await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 1), supplier="Farm1")
        store.append_unkeyed.assert_called_once()


class TestAdjustVariant:
    async def test_replaces_only_one_variant(self, ledger: Ledger):
        await ledger.record_movement(
            MovementKind.INCOMING,
            rosado=packages(7, 5),
            pardo=packages(9, 4),
            supplier="Farm1",
        )

        result = await ledger.adjust_variant(EggVariant.PARDO, packages(12, 1))

        assert result.stock.rosado_packages.total_count == 5
        assert result.stock.pardo_packages.total_count == 1
        assert result.stock.pardo_packages.total_for_class(12) == 1
        assert result.movement.kind is MovementKind.ADJUSTMENT
        assert result.movement.supplier == "Sistema"
        assert result.movement.notes == "Manual inventory correction"

    async def test_unknown_variant_rejected(self, ledger: Ledger):
        with pytest.raises(InvalidInputError):
            await ledger.adjust_variant("blanco", WeightedInventory())


class TestQueries:
    async def test_stock_history_ascending(self, ledger: Ledger, clock):
        for day in (17, 15, 16):
            clock.today = date(2024, 3, day)
            await ledger.get_or_create_today()

        history = await ledger.stock_history()
        assert [s.date for s in history] == ["2024-03-15", "2024-03-16", "2024-03-17"]
        assert history.skipped == 0

    async def test_undecodable_stock_is_skipped_and_counted(self, ledger: Ledger, store):
        await ledger.get_or_create_today()
        await store.put_keyed("daily_stocks", "2024-03-14", {"date": "2024-03-14", "rosadoPackages": "x"})

        history = await ledger.stock_history()
        in_range = await ledger.stocks_in_range("2024-03-01", "2024-03-31")

        assert [s.date for s in history] == ["2024-03-15"]
        assert history.skipped == 1
        assert in_range.skipped == 1

    async def test_stocks_in_range_inclusive(self, ledger: Ledger, clock):
        for day in (14, 15, 16, 17):
            clock.today = date(2024, 3, day)
            await ledger.get_or_create_today()

        result = await ledger.stocks_in_range("2024-03-15", "2024-03-16")
        assert [s.date for s in result] == ["2024-03-15", "2024-03-16"]

    async def test_range_start_after_end_rejected(self, ledger: Ledger):
        with pytest.raises(InvalidInputError):
            await ledger.stocks_in_range("2024-03-20", "2024-03-10")
        with pytest.raises(InvalidInputError):
            await ledger.movements_in_range("2024-03-20", "2024-03-10")

    async def test_movements_newest_first(self, ledger: Ledger, store):
        for hour in (9, 14, 11):
            movement = Movement(
                date="2024-03-15",
                kind=MovementKind.INCOMING,
                supplier=f"Farm{hour}",
                timestamp=datetime(2024, 3, 15, hour, tzinfo=UTC),
            )
            await store.append_unkeyed("cargo_entries", encode_movement(movement))

        movements = await ledger.movements_for_date("2024-03-15")
        assert [m.supplier for m in movements] == ["Farm14", "Farm11", "Farm9"]
        everything = await ledger.all_movements()
        assert [m.supplier for m in everything] == ["Farm14", "Farm11", "Farm9"]

    async def test_movements_in_range(self, ledger: Ledger, clock):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 1), supplier="Farm1")
        clock.today = date(2024, 3, 20)
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 1), supplier="Farm2")

        result = await ledger.movements_in_range("2024-03-01", "2024-03-16")
        assert [m.supplier for m in result] == ["Farm1"]

    async def test_day_statistics_and_supplier_summary(self, ledger: Ledger):
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 5), supplier="Farm1")
        await ledger.record_movement(MovementKind.INCOMING, pardo=packages(8, 2), supplier="Farm1")
        await ledger.record_movement(MovementKind.INCOMING, rosado=packages(9, 4), supplier="Farm2")
        await ledger.record_movement(MovementKind.OUTGOING, rosado=packages(7, 1), supplier="Shop")

        stats = await ledger.day_statistics("2024-03-15")
        summary = await ledger.supplier_summary("2024-03-15")

        assert stats.movement_count == 4
        assert stats.unique_suppliers == 3
        assert set(summary) == {"Farm1", "Farm2"}
        assert summary["Farm1"].packages == 7
        assert summary["Farm1"].deliveries == 2
        assert summary["Farm2"].packages == 4


class TestSettings:
    async def test_defaults_created_on_first_load(self, ledger: Ledger, store):
        settings = await ledger.load_settings()

        assert settings.frequent_suppliers == []
        assert settings.default_variant is EggVariant.ROSADO
        assert await store.get_keyed("app_settings", "main") is not None

    async def test_update_settings_persists(self, ledger: Ledger):
        settings = await ledger.load_settings()
        settings.company_name = "Granja Norte"
        await ledger.update_settings(settings)

        assert (await ledger.load_settings()).company_name == "Granja Norte"

    async def test_incoming_suppliers_are_learned_once(self, ledger: Ledger):
        for supplier in ("Farm1", "Farm1", " Farm2 ", "", "Sistema"):
            await ledger.record_movement(MovementKind.INCOMING, rosado=packages(7, 1), supplier=supplier)
        await ledger.record_movement(MovementKind.OUTGOING, rosado=packages(7, 1), supplier="Shop")

        assert await ledger.frequent_suppliers() == ["Farm1", "Farm2"]

    async def test_corrupt_settings_document_raises(self, ledger: Ledger, store):
        await store.put_keyed("app_settings", "main", {"defaultEggType": "blanco"})
        with pytest.raises(DecodeFailureError):
            await ledger.load_settings()


class TestKeyedLocks:
    async def test_serialises_same_key(self):
        locks = KeyedLocks()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("2024-03-15"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]
        assert len(locks) == 0

    async def test_lock_kept_while_awaited(self):
        locks = KeyedLocks()
        async with locks.hold("2024-03-15"):
            waiter = asyncio.create_task(_hold_once(locks, "2024-03-15"))
            await asyncio.sleep(0)
            assert len(locks) == 1
        await waiter
        assert len(locks) == 0

    async def test_released_after_error(self):
        locks = KeyedLocks()
        with pytest.raises(RuntimeError):
            async with locks.hold("2024-03-15"):
                raise RuntimeError("boom")
        assert len(locks) == 0


async def _hold_once(locks: KeyedLocks, key: str) -> None:
    async with locks.hold(key):
        pass
