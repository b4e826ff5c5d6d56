"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.
"""

from eggledger.application.dto.requests import (
    AdjustStockRequest,
    RecordMovementRequest,
    ReportRequest,
    SettingsUpdateRequest,
)
from eggledger.application.dto.responses import (
    DailyStockListResponse,
    DailyStockResponse,
    DayStatisticsResponse,
    ErrorResponse,
    HealthResponse,
    InventoryResponse,
    MovementListResponse,
    MovementResponse,
    MovementResultResponse,
    ReportResponse,
    SettingsResponse,
)

__all__ = [
    # Requests
    "AdjustStockRequest",
    "RecordMovementRequest",
    "ReportRequest",
    "SettingsUpdateRequest",
    # Responses
    "DailyStockListResponse",
    "DailyStockResponse",
    "DayStatisticsResponse",
    "ErrorResponse",
    "HealthResponse",
    "InventoryResponse",
    "MovementListResponse",
    "MovementResponse",
    "MovementResultResponse",
    "ReportResponse",
    "SettingsResponse",
]
