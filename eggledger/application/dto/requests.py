"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from eggledger.core.entities import EggVariant, MovementKind, ReportDateRange, ReportKind

# Sparse per-class counters: {weight_kg: [ten tenths counters]}
InventoryPayload = dict[int, list[int]]


class RecordMovementRequest(BaseModel):
    """Request to record a movement against today's stock."""

    kind: MovementKind = Field(
        ...,
        description="Movement kind (incoming, outgoing or adjustment)",
        examples=["incoming"],
    )
    rosado: InventoryPayload = Field(
        default_factory=dict,
        description="Rosado packages per weight class",
        examples=[{"7": [5, 0, 0, 0, 0, 0, 0, 0, 0, 0]}],
    )
    pardo: InventoryPayload = Field(
        default_factory=dict,
        description="Pardo packages per weight class",
    )
    supplier: str = Field(default="", max_length=200, description="Supplier name")
    notes: str | None = Field(default=None, max_length=1000)


class AdjustStockRequest(BaseModel):
    """Manual correction replacing one variant of today's stock."""

    packages: InventoryPayload = Field(
        default_factory=dict,
        description="Complete replacement counters; omitted classes become zero",
    )
    notes: str | None = Field(default=None, max_length=1000)


class ReportRequest(BaseModel):
    """Request for a report over a preset or custom date range."""

    kind: ReportKind = Field(default=ReportKind.WEEKLY, description="Report kind")
    date_range: ReportDateRange = Field(
        default=ReportDateRange.LAST_WEEK,
        description="Preset range; use 'custom' with start_date/end_date",
    )
    start_date: date | None = Field(default=None, description="Custom range start")
    end_date: date | None = Field(default=None, description="Custom range end")


class SettingsUpdateRequest(BaseModel):
    """Partial update of the app settings document. Unset fields are kept."""

    company_name: str | None = Field(default=None, max_length=200)
    company_logo: str | None = None
    auto_backup_enabled: bool | None = None
    last_backup_date: datetime | None = None
    is_first_launch: bool | None = None
    frequent_suppliers: list[str] | None = None
    default_variant: EggVariant | None = None
    show_both_variants: bool | None = None
