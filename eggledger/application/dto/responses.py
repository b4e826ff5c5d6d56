"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from eggledger.core.entities import (
    AppSettings,
    DailyStock,
    Movement,
    ReportData,
    WeightedInventory,
)
from eggledger.core.records import encode_inventory


class InventoryResponse(BaseModel):
    """Counters per weight class, keyed ``kg7`` .. ``kg13``."""

    packages: dict[str, list[int]] = Field(..., description="Tenths counters per class")
    total_packages: int
    total_weight: float

    @classmethod
    def from_entity(cls, inventory: WeightedInventory) -> "InventoryResponse":
        return cls(
            packages=encode_inventory(inventory),
            total_packages=inventory.total_count,
            total_weight=inventory.total_weight,
        )


class DailyStockResponse(BaseModel):
    """Daily stock response DTO."""

    date: str = Field(..., description="Business date (YYYY-MM-DD)")
    rosado: InventoryResponse
    pardo: InventoryResponse
    total_packages: int
    total_weight: float
    is_closed: bool
    is_current_day: bool
    closed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, stock: DailyStock) -> "DailyStockResponse":
        return cls(
            date=stock.date,
            rosado=InventoryResponse.from_entity(stock.rosado_packages),
            pardo=InventoryResponse.from_entity(stock.pardo_packages),
            total_packages=stock.total_packages,
            total_weight=stock.total_weight,
            is_closed=stock.is_closed,
            is_current_day=stock.is_current_day,
            closed_at=stock.closed_at,
            created_at=stock.created_at,
            updated_at=stock.updated_at,
        )


class DailyStockListResponse(BaseModel):
    stocks: list[DailyStockResponse]
    total: int
    skipped: int = Field(default=0, description="Stored records that could not be decoded")


class MovementResponse(BaseModel):
    """Movement response DTO."""

    id: str | None
    date: str
    kind: str
    supplier: str
    rosado: InventoryResponse
    pardo: InventoryResponse
    total_packages: int
    total_weight: float
    notes: str | None = None
    timestamp: datetime

    @classmethod
    def from_entity(cls, movement: Movement) -> "MovementResponse":
        return cls(
            id=movement.id,
            date=movement.date,
            kind=movement.kind.value,
            supplier=movement.supplier,
            rosado=InventoryResponse.from_entity(movement.rosado_packages),
            pardo=InventoryResponse.from_entity(movement.pardo_packages),
            total_packages=movement.total_packages,
            total_weight=movement.total_weight,
            notes=movement.notes,
            timestamp=movement.timestamp,
        )


class MovementListResponse(BaseModel):
    movements: list[MovementResponse]
    total: int
    skipped: int = 0


class MovementResultResponse(BaseModel):
    """Response for recording a movement or adjusting stock."""

    movement: MovementResponse
    stock: DailyStockResponse
    clamped: bool = Field(
        default=False, description="True when an outgoing movement exceeded the stock"
    )
    shortfall: dict[str, int] = Field(
        default_factory=dict, description="Packages that could not be removed, per variant"
    )


class SupplierTallyResponse(BaseModel):
    name: str
    packages: int
    deliveries: int


class DayStatisticsResponse(BaseModel):
    """Movement statistics and supplier breakdown for one date."""

    date: str
    movement_count: int
    unique_suppliers: int
    suppliers: list[SupplierTallyResponse] = Field(default_factory=list)


class SupplierResponse(BaseModel):
    name: str
    total_packages: int
    deliveries: int
    percentage: float


class WeightClassResponse(BaseModel):
    weight: int
    rosado: int
    pardo: int
    total: int


class ChartPointResponse(BaseModel):
    date: str
    total_packages: int
    rosado_packages: int
    pardo_packages: int


class TrendsResponse(BaseModel):
    packages: str
    weight: str
    rosado: str
    pardo: str


class ReportResponse(BaseModel):
    """Report response DTO."""

    title: str
    kind: str
    date_range: str
    start_date: str
    end_date: str
    total_packages: int
    total_weight: float
    total_rosado: int
    total_pardo: int
    rosado_percentage: float
    pardo_percentage: float
    average_packages_per_day: int
    active_days: int
    inactive_days: int
    suppliers: list[SupplierResponse]
    top_suppliers: list[SupplierResponse]
    weight_distribution: list[WeightClassResponse]
    trends: TrendsResponse
    chart_data: list[ChartPointResponse]
    insights: list[str]
    recommendations: list[str]
    daily_stocks: list[DailyStockResponse]
    movements: list[MovementResponse]
    skipped_records: int = 0

    @classmethod
    def from_entity(cls, report: ReportData) -> "ReportResponse":
        def supplier(s) -> SupplierResponse:
            return SupplierResponse(
                name=s.name,
                total_packages=s.total_packages,
                deliveries=s.deliveries,
                percentage=s.percentage,
            )

        return cls(
            title=report.title,
            kind=report.kind.value,
            date_range=report.date_range,
            start_date=report.start_date,
            end_date=report.end_date,
            total_packages=report.total_packages,
            total_weight=report.total_weight,
            total_rosado=report.total_rosado,
            total_pardo=report.total_pardo,
            rosado_percentage=report.rosado_percentage,
            pardo_percentage=report.pardo_percentage,
            average_packages_per_day=report.average_packages_per_day,
            active_days=report.active_days,
            inactive_days=report.inactive_days,
            suppliers=[supplier(s) for s in report.suppliers],
            top_suppliers=[supplier(s) for s in report.top_suppliers],
            weight_distribution=[
                WeightClassResponse(weight=w.weight, rosado=w.rosado, pardo=w.pardo, total=w.total)
                for w in report.weight_distribution
            ],
            trends=TrendsResponse(
                packages=report.trends.packages.value,
                weight=report.trends.weight.value,
                rosado=report.trends.rosado.value,
                pardo=report.trends.pardo.value,
            ),
            chart_data=[
                ChartPointResponse(
                    date=p.date,
                    total_packages=p.total_packages,
                    rosado_packages=p.rosado_packages,
                    pardo_packages=p.pardo_packages,
                )
                for p in report.chart_data
            ],
            insights=list(report.insights),
            recommendations=list(report.recommendations),
            daily_stocks=[DailyStockResponse.from_entity(s) for s in report.daily_stocks],
            movements=[MovementResponse.from_entity(m) for m in report.movements],
            skipped_records=report.skipped_records,
        )


class SettingsResponse(BaseModel):
    """App settings response DTO."""

    current_date: str
    is_first_launch: bool
    last_backup_date: datetime | None = None
    auto_backup_enabled: bool
    company_name: str
    company_logo: str | None = None
    frequent_suppliers: list[str]
    default_variant: str
    show_both_variants: bool

    @classmethod
    def from_entity(cls, settings: AppSettings) -> "SettingsResponse":
        return cls(
            current_date=settings.current_date,
            is_first_launch=settings.is_first_launch,
            last_backup_date=settings.last_backup_date,
            auto_backup_enabled=settings.auto_backup_enabled,
            company_name=settings.company_name,
            company_logo=settings.company_logo,
            frequent_suppliers=list(settings.frequent_suppliers),
            default_variant=settings.default_variant.value,
            show_both_variants=settings.show_both_variants,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status (healthy, degraded)")
    version: str
    environment: str
    storage_backend: str
    storage_ok: bool
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. DAILY_STOCK_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
