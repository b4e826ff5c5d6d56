"""Report domain entities."""

import calendar
from datetime import date, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from eggledger.core.entities.daily_stock import DailyStock
from eggledger.core.entities.movement import Movement


class ReportKind(str, Enum):
    """Report flavours offered to the user."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SUPPLIER = "supplier"
    EGG_TYPE = "eggType"

    @property
    def display_name(self) -> str:
        return {
            ReportKind.DAILY: "Daily",
            ReportKind.WEEKLY: "Weekly",
            ReportKind.MONTHLY: "Monthly",
            ReportKind.SUPPLIER: "Supplier",
            ReportKind.EGG_TYPE: "Egg type",
        }[self]


def _months_back(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


class ReportDateRange(str, Enum):
    """Preset date ranges, resolved relative to a given day."""

    LAST_WEEK = "last_week"
    LAST_MONTH = "last_month"
    LAST_3_MONTHS = "last_3_months"
    LAST_YEAR = "last_year"
    CUSTOM = "custom"

    def resolve(
        self,
        today: date,
        custom_start: date | None = None,
        custom_end: date | None = None,
    ) -> tuple[date, date]:
        """Return the inclusive (start, end) pair for this preset."""
        if self is ReportDateRange.LAST_WEEK:
            return today - timedelta(days=7), today
        if self is ReportDateRange.LAST_MONTH:
            return today - timedelta(days=30), today
        if self is ReportDateRange.LAST_3_MONTHS:
            return _months_back(today, 3), today
        if self is ReportDateRange.LAST_YEAR:
            return _months_back(today, 12), today
        return custom_start or today, custom_end or today


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class SupplierData(BaseModel):
    """Incoming volume attributed to one supplier within a report range."""

    name: str
    total_packages: int
    deliveries: int
    percentage: float


class WeightClassDistribution(BaseModel):
    weight: int
    rosado: int
    pardo: int

    @property
    def total(self) -> int:
        return self.rosado + self.pardo


class ChartDataPoint(BaseModel):
    date: str
    total_packages: int
    rosado_packages: int
    pardo_packages: int


class ReportTrends(BaseModel):
    packages: TrendDirection = TrendDirection.STABLE
    weight: TrendDirection = TrendDirection.STABLE
    rosado: TrendDirection = TrendDirection.STABLE
    pardo: TrendDirection = TrendDirection.STABLE


class ReportData(BaseModel):
    """Analytics for a date range, fully materialised."""

    title: str
    date_range: str
    start_date: str
    end_date: str
    kind: ReportKind
    daily_stocks: list[DailyStock] = Field(default_factory=list)
    movements: list[Movement] = Field(default_factory=list)

    total_packages: int = 0
    total_weight: float = 0.0
    total_rosado: int = 0
    total_pardo: int = 0
    rosado_percentage: float = 0.0
    pardo_percentage: float = 0.0
    average_packages_per_day: int = 0
    active_days: int = 0
    inactive_days: int = 0

    suppliers: list[SupplierData] = Field(default_factory=list)
    top_suppliers: list[SupplierData] = Field(default_factory=list)
    weight_distribution: list[WeightClassDistribution] = Field(default_factory=list)
    trends: ReportTrends = Field(default_factory=ReportTrends)
    chart_data: list[ChartDataPoint] = Field(default_factory=list)

    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    # Records dropped because they could not be decoded
    skipped_records: int = 0

    @property
    def has_rosado_data(self) -> bool:
        return self.total_rosado > 0

    @property
    def has_pardo_data(self) -> bool:
        return self.total_pardo > 0
