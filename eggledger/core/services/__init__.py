"""Core services."""

from eggledger.core.services.ledger import (
    DayStatistics,
    Ledger,
    MovementResult,
    QueryResult,
    SupplierTally,
)
from eggledger.core.services.report_engine import (
    ReportEngine,
    build_report,
    classify_trend,
    rank_suppliers,
    weight_distribution,
)

__all__ = [
    "Ledger",
    "MovementResult",
    "QueryResult",
    "DayStatistics",
    "SupplierTally",
    "ReportEngine",
    "build_report",
    "classify_trend",
    "rank_suppliers",
    "weight_distribution",
]
