"""Close Day Use Case: snapshot today's inventory and close the day."""

from eggledger.application.dto.responses import DailyStockResponse
from eggledger.config import get_logger
from eggledger.core.entities import DailyStock
from eggledger.core.services import Ledger

logger = get_logger(__name__)


class CloseDayUseCase:
    def __init__(self, ledger: Ledger | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> Ledger:
        if self._ledger is None:
            from eggledger.application.services import get_ledger

            self._ledger = get_ledger()
        return self._ledger

    async def execute(self) -> DailyStock:
        ledger = self._get_ledger()
        logger.info("close_day_started", date=ledger.today_key())
        return await ledger.close_day()

    def to_response(self, stock: DailyStock) -> DailyStockResponse:
        return DailyStockResponse.from_entity(stock)
