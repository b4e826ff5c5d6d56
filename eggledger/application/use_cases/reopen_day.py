"""Reopen Day Use Case: undo a day close."""

from eggledger.application.dto.responses import DailyStockResponse
from eggledger.config import get_logger
from eggledger.core.entities import DailyStock
from eggledger.core.services import Ledger

logger = get_logger(__name__)


class ReopenDayUseCase:
    def __init__(self, ledger: Ledger | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> Ledger:
        if self._ledger is None:
            from eggledger.application.services import get_ledger

            self._ledger = get_ledger()
        return self._ledger

    async def execute(self, date_key: str) -> DailyStock:
        logger.info("reopen_day_started", date=date_key)
        return await self._get_ledger().reopen_day(date_key)

    def to_response(self, stock: DailyStock) -> DailyStockResponse:
        return DailyStockResponse.from_entity(stock)
