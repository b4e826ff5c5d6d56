"""Behaviour shared by every IDocumentStore backend."""

from eggledger.core.interfaces import IDocumentStore


class TestKeyedRecords:
    async def test_get_missing_returns_none(self, document_store: IDocumentStore):
        assert await document_store.get_keyed("daily_stocks", "2024-03-15") is None

    async def test_put_then_get(self, document_store: IDocumentStore):
        await document_store.put_keyed("daily_stocks", "2024-03-15", {"date": "2024-03-15", "n": 1})
        record = await document_store.get_keyed("daily_stocks", "2024-03-15")
        assert record == {"date": "2024-03-15", "n": 1, "id": "2024-03-15"}

    async def test_put_overwrites(self, document_store: IDocumentStore):
        await document_store.put_keyed("daily_stocks", "k", {"n": 1})
        await document_store.put_keyed("daily_stocks", "k", {"n": 2})
        record = await document_store.get_keyed("daily_stocks", "k")
        assert record["n"] == 2

    async def test_collections_are_isolated(self, document_store: IDocumentStore):
        await document_store.put_keyed("daily_stocks", "main", {"n": 1})
        assert await document_store.get_keyed("app_settings", "main") is None

    async def test_returned_record_is_a_copy(self, document_store: IDocumentStore):
        await document_store.put_keyed("app_settings", "main", {"suppliers": ["A"]})
        record = await document_store.get_keyed("app_settings", "main")
        record["suppliers"].append("B")
        again = await document_store.get_keyed("app_settings", "main")
        assert again["suppliers"] == ["A"]

    async def test_id_field_not_stored_in_body(self, document_store: IDocumentStore):
        await document_store.put_keyed("daily_stocks", "k", {"id": "other", "n": 1})
        record = await document_store.get_keyed("daily_stocks", "k")
        assert record["id"] == "k"


class TestUnkeyedRecords:
    async def test_append_generates_distinct_ids(self, document_store: IDocumentStore):
        first = await document_store.append_unkeyed("cargo_entries", {"date": "2024-03-15"})
        second = await document_store.append_unkeyed("cargo_entries", {"date": "2024-03-15"})
        assert first != second
        record = await document_store.get_keyed("cargo_entries", first)
        assert record == {"date": "2024-03-15", "id": first}


class TestQueries:
    async def _seed(self, store: IDocumentStore) -> None:
        for day, ts in [
            ("2024-03-12", "2024-03-12T10:00:00"),
            ("2024-03-10", "2024-03-10T09:00:00"),
            ("2024-03-15", "2024-03-15T08:00:00"),
            ("2024-03-14", "2024-03-14T07:00:00"),
        ]:
            await store.append_unkeyed("cargo_entries", {"date": day, "timestamp": ts})

    async def test_query_range_inclusive_and_ordered(self, document_store: IDocumentStore):
        await self._seed(document_store)
        records = await document_store.query_range(
            "cargo_entries", "date", gte="2024-03-10", lte="2024-03-14", order_by="date"
        )
        assert [r["date"] for r in records] == ["2024-03-10", "2024-03-12", "2024-03-14"]
        assert all("id" in r for r in records)

    async def test_query_range_empty(self, document_store: IDocumentStore):
        await self._seed(document_store)
        records = await document_store.query_range(
            "cargo_entries", "date", gte="2025-01-01", lte="2025-12-31", order_by="date"
        )
        assert records == []

    async def test_query_equals(self, document_store: IDocumentStore):
        await self._seed(document_store)
        await document_store.append_unkeyed(
            "cargo_entries", {"date": "2024-03-15", "timestamp": "2024-03-15T09:00:00"}
        )
        records = await document_store.query_equals("cargo_entries", "date", "2024-03-15")
        assert [r["timestamp"] for r in records] == ["2024-03-15T08:00:00", "2024-03-15T09:00:00"]

    async def test_query_equals_boolean(self, document_store: IDocumentStore):
        await document_store.put_keyed("daily_stocks", "a", {"isCurrentDay": True})
        await document_store.put_keyed("daily_stocks", "b", {"isCurrentDay": False})
        records = await document_store.query_equals("daily_stocks", "isCurrentDay", True)
        assert [r["id"] for r in records] == ["a"]

    async def test_query_all_ascending(self, document_store: IDocumentStore):
        await self._seed(document_store)
        records = await document_store.query_all("cargo_entries", order_by="date")
        assert [r["date"] for r in records] == [
            "2024-03-10",
            "2024-03-12",
            "2024-03-14",
            "2024-03-15",
        ]

    async def test_query_all_descending(self, document_store: IDocumentStore):
        await self._seed(document_store)
        records = await document_store.query_all(
            "cargo_entries", order_by="timestamp", descending=True
        )
        assert records[0]["timestamp"] == "2024-03-15T08:00:00"
        assert records[-1]["timestamp"] == "2024-03-10T09:00:00"
