"""
Dependency injection container for FastAPI.

Provides service instances to route handlers. Tests override
``get_ledger_dep`` to run every route against an isolated Ledger.
"""

from functools import lru_cache

from fastapi import Depends

from eggledger.application.services import get_ledger
from eggledger.application.use_cases import (
    AdjustStockUseCase,
    CloseDayUseCase,
    GenerateReportUseCase,
    RecordMovementUseCase,
    ReopenDayUseCase,
)
from eggledger.config import Settings, get_settings
from eggledger.core.services import Ledger, ReportEngine


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
def get_ledger_dep() -> Ledger:
    """Get the shared ledger."""
    return get_ledger()


def get_report_engine_dep(ledger: Ledger = Depends(get_ledger_dep)) -> ReportEngine:
    return ReportEngine(ledger)


# Use case dependencies
def get_record_movement_use_case(
    ledger: Ledger = Depends(get_ledger_dep),
) -> RecordMovementUseCase:
    return RecordMovementUseCase(ledger)


def get_adjust_stock_use_case(ledger: Ledger = Depends(get_ledger_dep)) -> AdjustStockUseCase:
    return AdjustStockUseCase(ledger)


def get_close_day_use_case(ledger: Ledger = Depends(get_ledger_dep)) -> CloseDayUseCase:
    return CloseDayUseCase(ledger)


def get_reopen_day_use_case(ledger: Ledger = Depends(get_ledger_dep)) -> ReopenDayUseCase:
    return ReopenDayUseCase(ledger)


def get_generate_report_use_case(
    engine: ReportEngine = Depends(get_report_engine_dep),
) -> GenerateReportUseCase:
    return GenerateReportUseCase(engine)
