"""Application use cases."""

from eggledger.application.use_cases.adjust_stock import AdjustStockUseCase
from eggledger.application.use_cases.close_day import CloseDayUseCase
from eggledger.application.use_cases.generate_report import GenerateReportUseCase
from eggledger.application.use_cases.record_movement import RecordMovementUseCase
from eggledger.application.use_cases.reopen_day import ReopenDayUseCase

__all__ = [
    "AdjustStockUseCase",
    "CloseDayUseCase",
    "GenerateReportUseCase",
    "RecordMovementUseCase",
    "ReopenDayUseCase",
]
