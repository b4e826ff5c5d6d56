"""Adjust Stock Use Case: replace one variant of today's inventory."""

from eggledger.application.dto.requests import AdjustStockRequest
from eggledger.application.dto.responses import (
    DailyStockResponse,
    MovementResponse,
    MovementResultResponse,
)
from eggledger.config import get_logger
from eggledger.core.entities import EggVariant, WeightedInventory
from eggledger.core.services import Ledger, MovementResult

logger = get_logger(__name__)


class AdjustStockUseCase:
    """Manual inventory correction for one egg variant."""

    def __init__(self, ledger: Ledger | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> Ledger:
        if self._ledger is None:
            from eggledger.application.services import get_ledger

            self._ledger = get_ledger()
        return self._ledger

    async def execute(self, variant: EggVariant, request: AdjustStockRequest) -> MovementResult:
        inventory = WeightedInventory.from_classes(request.packages)
        logger.info(
            "adjust_stock_started",
            variant=EggVariant(variant).value,
            packages=inventory.total_count,
        )
        return await self._get_ledger().adjust_variant(variant, inventory, notes=request.notes)

    def to_response(self, result: MovementResult) -> MovementResultResponse:
        return MovementResultResponse(
            movement=MovementResponse.from_entity(result.movement),
            stock=DailyStockResponse.from_entity(result.stock),
        )
