"""Movement endpoints: record entries and browse movement history."""

from fastapi import APIRouter, Depends, status

from eggledger.api.dependencies import get_ledger_dep, get_record_movement_use_case
from eggledger.application.dto.requests import RecordMovementRequest
from eggledger.application.dto.responses import (
    DayStatisticsResponse,
    ErrorResponse,
    MovementListResponse,
    MovementResponse,
    MovementResultResponse,
    SupplierTallyResponse,
)
from eggledger.application.use_cases import RecordMovementUseCase
from eggledger.core.exceptions import InvalidInputError
from eggledger.core.services import Ledger

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.post(
    "",
    response_model=MovementResultResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def record_movement(
    request: RecordMovementRequest,
    use_case: RecordMovementUseCase = Depends(get_record_movement_use_case),
) -> MovementResultResponse:
    """Record an incoming, outgoing or adjustment movement for today."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=MovementListResponse)
async def list_movements(
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    ledger: Ledger = Depends(get_ledger_dep),
) -> MovementListResponse:
    """
    Movements, most recent first.

    Filter by a single ``date`` or by ``start_date`` plus ``end_date``;
    without filters every movement is returned.
    """
    if date is not None:
        result = await ledger.movements_for_date(date)
    elif start_date is not None and end_date is not None:
        result = await ledger.movements_in_range(start_date, end_date)
    elif start_date is None and end_date is None:
        result = await ledger.all_movements()
    else:
        raise InvalidInputError("start_date", "start_date and end_date go together")

    return MovementListResponse(
        movements=[MovementResponse.from_entity(m) for m in result],
        total=len(result),
        skipped=result.skipped,
    )


@router.get("/{date}/summary", response_model=DayStatisticsResponse)
async def day_summary(date: str, ledger: Ledger = Depends(get_ledger_dep)) -> DayStatisticsResponse:
    """Movement count, distinct suppliers and per-supplier incoming totals."""
    stats = await ledger.day_statistics(date)
    summary = await ledger.supplier_summary(date)
    return DayStatisticsResponse(
        date=stats.date,
        movement_count=stats.movement_count,
        unique_suppliers=stats.unique_suppliers,
        suppliers=[
            SupplierTallyResponse(name=name, packages=t.packages, deliveries=t.deliveries)
            for name, t in sorted(summary.items(), key=lambda item: (-item[1].packages, item[0]))
        ],
    )
