"""Daily stock endpoints: today's stock, history, close/reopen, corrections."""

from fastapi import APIRouter, Depends

from eggledger.api.dependencies import (
    get_adjust_stock_use_case,
    get_close_day_use_case,
    get_ledger_dep,
    get_reopen_day_use_case,
)
from eggledger.application.dto.requests import AdjustStockRequest
from eggledger.application.dto.responses import (
    DailyStockListResponse,
    DailyStockResponse,
    ErrorResponse,
    MovementResultResponse,
)
from eggledger.application.use_cases import AdjustStockUseCase, CloseDayUseCase, ReopenDayUseCase
from eggledger.core.entities import EggVariant
from eggledger.core.exceptions import DailyStockNotFoundError, InvalidInputError
from eggledger.core.services import Ledger

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.get("/today", response_model=DailyStockResponse)
async def get_today(ledger: Ledger = Depends(get_ledger_dep)) -> DailyStockResponse:
    """Get today's stock, creating an empty open day if needed."""
    stock = await ledger.get_or_create_today()
    return DailyStockResponse.from_entity(stock)


@router.get("/history", response_model=DailyStockListResponse)
async def get_history(
    start_date: str | None = None,
    end_date: str | None = None,
    ledger: Ledger = Depends(get_ledger_dep),
) -> DailyStockListResponse:
    """All recorded days, or the days within ``[start_date, end_date]``."""
    if start_date is None and end_date is None:
        result = await ledger.stock_history()
    elif start_date is not None and end_date is not None:
        result = await ledger.stocks_in_range(start_date, end_date)
    else:
        raise InvalidInputError("start_date", "start_date and end_date go together")

    return DailyStockListResponse(
        stocks=[DailyStockResponse.from_entity(s) for s in result],
        total=len(result),
        skipped=result.skipped,
    )


@router.post(
    "/today/close",
    response_model=DailyStockResponse,
    responses={404: {"model": ErrorResponse}},
)
async def close_today(
    use_case: CloseDayUseCase = Depends(get_close_day_use_case),
) -> DailyStockResponse:
    """Snapshot today's inventory and close the day."""
    stock = await use_case.execute()
    return use_case.to_response(stock)


@router.put(
    "/today/{variant}",
    response_model=MovementResultResponse,
    responses={400: {"model": ErrorResponse}},
)
async def adjust_today(
    variant: EggVariant,
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> MovementResultResponse:
    """Replace today's inventory for one variant."""
    result = await use_case.execute(variant, request)
    return use_case.to_response(result)


@router.get(
    "/{date}",
    response_model=DailyStockResponse,
    responses={404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
)
async def get_stock(date: str, ledger: Ledger = Depends(get_ledger_dep)) -> DailyStockResponse:
    stock = await ledger.get_stock(date)
    if stock is None:
        raise DailyStockNotFoundError(date)
    return DailyStockResponse.from_entity(stock)


@router.post(
    "/{date}/reopen",
    response_model=DailyStockResponse,
    responses={404: {"model": ErrorResponse}},
)
async def reopen(
    date: str,
    use_case: ReopenDayUseCase = Depends(get_reopen_day_use_case),
) -> DailyStockResponse:
    """Reopen a closed day."""
    stock = await use_case.execute(date)
    return use_case.to_response(stock)
