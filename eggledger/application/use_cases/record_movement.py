"""Record Movement Use Case: incoming, outgoing or adjustment entry for today."""

from eggledger.application.dto.requests import RecordMovementRequest
from eggledger.application.dto.responses import (
    DailyStockResponse,
    MovementResponse,
    MovementResultResponse,
)
from eggledger.config import get_logger
from eggledger.core.entities import WeightedInventory
from eggledger.core.services import Ledger, MovementResult

logger = get_logger(__name__)


class RecordMovementUseCase:
    """Convert the request payload to inventories and hand it to the Ledger."""

    def __init__(self, ledger: Ledger | None = None):
        self._ledger = ledger

    def _get_ledger(self) -> Ledger:
        if self._ledger is None:
            from eggledger.application.services import get_ledger

            self._ledger = get_ledger()
        return self._ledger

    async def execute(self, request: RecordMovementRequest) -> MovementResult:
        logger.info(
            "record_movement_started",
            kind=request.kind.value,
            supplier=request.supplier,
        )
        ledger = self._get_ledger()
        return await ledger.record_movement(
            request.kind,
            rosado=WeightedInventory.from_classes(request.rosado),
            pardo=WeightedInventory.from_classes(request.pardo),
            supplier=request.supplier.strip(),
            notes=request.notes,
        )

    def to_response(self, result: MovementResult) -> MovementResultResponse:
        """Convert result to API response."""
        return MovementResultResponse(
            movement=MovementResponse.from_entity(result.movement),
            stock=DailyStockResponse.from_entity(result.stock),
            clamped=result.clamped,
            shortfall={
                variant.value: outcome.shortfall_count
                for variant, outcome in result.shortfall.items()
                if outcome.clamped
            },
        )
