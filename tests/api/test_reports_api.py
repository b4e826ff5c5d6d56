"""API tests for report endpoints."""

from httpx import AsyncClient


class TestReportsAPI:
    async def test_default_weekly_report(self, client: AsyncClient):
        await client.post(
            "/api/movements",
            json={"kind": "incoming", "rosado": {"7": [5] + [0] * 9}, "supplier": "Farm1"},
        )

        response = await client.post("/api/reports", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["kind"] == "weekly"
        assert data["start_date"] == "2024-03-08"
        assert data["end_date"] == "2024-03-15"
        assert data["total_packages"] == 5
        assert data["suppliers"][0]["name"] == "Farm1"
        assert data["weight_distribution"] == [{"weight": 7, "rosado": 5, "pardo": 0, "total": 5}]
        assert data["insights"]
        assert data["recommendations"]

    async def test_custom_range(self, client: AsyncClient):
        response = await client.post(
            "/api/reports",
            json={
                "kind": "daily",
                "date_range": "custom",
                "start_date": "2024-03-01",
                "end_date": "2024-03-02",
            },
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Daily - 2024-03-01 - 2024-03-02"
        assert response.json()["total_packages"] == 0

    async def test_custom_range_without_dates_returns_400(self, client: AsyncClient):
        response = await client.post("/api/reports", json={"date_range": "custom"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    async def test_inverted_custom_range_returns_400(self, client: AsyncClient):
        response = await client.post(
            "/api/reports",
            json={"date_range": "custom", "start_date": "2024-03-10", "end_date": "2024-03-01"},
        )
        assert response.status_code == 400

    async def test_unknown_kind_returns_422(self, client: AsyncClient):
        response = await client.post("/api/reports", json={"kind": "yearly"})
        assert response.status_code == 422
