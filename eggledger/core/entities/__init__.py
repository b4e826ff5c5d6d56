"""Core domain entities."""

from eggledger.core.entities.app_settings import AppSettings
from eggledger.core.entities.daily_stock import DailyStock, StockTotals
from eggledger.core.entities.inventory import (
    SUB_BUCKETS,
    WEIGHT_CLASSES,
    EggVariant,
    FrozenInventory,
    SubtractResult,
    WeightedInventory,
)
from eggledger.core.entities.movement import Movement, MovementKind, validate_date_key
from eggledger.core.entities.report import (
    ChartDataPoint,
    ReportData,
    ReportDateRange,
    ReportKind,
    ReportTrends,
    SupplierData,
    TrendDirection,
    WeightClassDistribution,
)

__all__ = [
    # Inventory
    "WEIGHT_CLASSES",
    "SUB_BUCKETS",
    "EggVariant",
    "FrozenInventory",
    "SubtractResult",
    "WeightedInventory",
    # Movement
    "Movement",
    "MovementKind",
    "validate_date_key",
    # Daily stock
    "DailyStock",
    "StockTotals",
    # Settings
    "AppSettings",
    # Report
    "ChartDataPoint",
    "ReportData",
    "ReportDateRange",
    "ReportKind",
    "ReportTrends",
    "SupplierData",
    "TrendDirection",
    "WeightClassDistribution",
]
