"""Tests for CloseDayUseCase."""

from unittest.mock import AsyncMock

import pytest

from eggledger.application.use_cases.close_day import CloseDayUseCase
from eggledger.core.entities import DailyStock
from eggledger.core.exceptions import DailyStockNotFoundError
from eggledger.core.services import Ledger


class TestCloseDayUseCase:
    async def test_closes_today(self, ledger: Ledger):
        await ledger.get_or_create_today()
        use_case = CloseDayUseCase(ledger)

        stock = await use_case.execute()
        response = use_case.to_response(stock)

        assert response.is_closed is True
        assert response.is_current_day is False
        assert response.closed_at is not None

    async def test_missing_today_propagates(self, ledger: Ledger):
        with pytest.raises(DailyStockNotFoundError):
            await CloseDayUseCase(ledger).execute()

    async def test_delegates_to_ledger(self):
        ledger = AsyncMock(spec=Ledger)
        ledger.today_key.return_value = "2024-03-15"
        ledger.close_day.return_value = DailyStock(date="2024-03-15", is_closed=True)

        stock = await CloseDayUseCase(ledger).execute()

        assert stock.is_closed is True
        ledger.close_day.assert_awaited_once_with()
