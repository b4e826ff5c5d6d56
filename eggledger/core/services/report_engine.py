"""
Report engine.

Rolls a date range of daily stocks and movements up into ``ReportData``.
Fetching goes through the Ledger; everything after the fetch is a pure
function of the records so it can be tested without a store.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date
from fractions import Fraction

from eggledger.config import ReportSettings, get_logger, get_settings
from eggledger.core.entities.daily_stock import DailyStock
from eggledger.core.entities.inventory import WEIGHT_CLASSES
from eggledger.core.entities.movement import Movement, MovementKind
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
from eggledger.core.services.ledger import Ledger

logger = get_logger(__name__)


def classify_trend(
    values: Sequence[int] | Sequence[float],
    window: int = 3,
    threshold: float = 0.10,
) -> TrendDirection:
    """
    Compare the sum of the last ``window`` values with the first ``window``.

    With fewer than two values the trend is stable. Windows overlap when
    there are fewer than ``2 * window`` values. Integer series compare
    against the floored bounds, float series against the exact products.
    """
    if len(values) < 2:
        return TrendDirection.STABLE

    recent = sum(values[-window:])
    previous = sum(values[:window])

    if all(isinstance(v, int) for v in values):
        step = Fraction(str(threshold))
        upper = math.floor(previous * (1 + step))
        lower = math.floor(previous * (1 - step))
    else:
        upper = previous * (1 + threshold)
        lower = previous * (1 - threshold)

    if recent > upper:
        return TrendDirection.UP
    if recent < lower:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def rank_suppliers(
    movements: Sequence[Movement],
    total_packages: int,
    system_supplier: str,
) -> list[SupplierData]:
    """Incoming volume per supplier, largest first (ties by name)."""
    grouped: dict[str, list[Movement]] = {}
    for movement in movements:
        if movement.kind is not MovementKind.INCOMING:
            continue
        if not movement.supplier or movement.supplier == system_supplier:
            continue
        grouped.setdefault(movement.supplier, []).append(movement)

    ranking = []
    for name, entries in grouped.items():
        packages = sum(m.total_packages for m in entries)
        percentage = packages / total_packages * 100 if total_packages > 0 else 0.0
        ranking.append(
            SupplierData(
                name=name,
                total_packages=packages,
                deliveries=len(entries),
                percentage=percentage,
            )
        )
    ranking.sort(key=lambda s: (-s.total_packages, s.name))
    return ranking


def weight_distribution(stocks: Sequence[DailyStock]) -> list[WeightClassDistribution]:
    """Per weight class rosado/pardo totals; empty classes are omitted."""
    distribution = []
    for weight in WEIGHT_CLASSES:
        entry = WeightClassDistribution(
            weight=weight,
            rosado=sum(s.rosado_packages.total_for_class(weight) for s in stocks),
            pardo=sum(s.pardo_packages.total_for_class(weight) for s in stocks),
        )
        if entry.total > 0:
            distribution.append(entry)
    return distribution


def compute_trends(stocks: Sequence[DailyStock], settings: ReportSettings) -> ReportTrends:
    def trend(values: Sequence[int] | Sequence[float]) -> TrendDirection:
        return classify_trend(values, settings.trend_window, settings.trend_threshold)

    return ReportTrends(
        packages=trend([s.total_packages for s in stocks]),
        weight=trend([s.total_weight for s in stocks]),
        rosado=trend([s.rosado_packages.total_count for s in stocks]),
        pardo=trend([s.pardo_packages.total_count for s in stocks]),
    )


def _display_day(date_key: str) -> str:
    return date.fromisoformat(date_key).strftime("%d %b")


def build_insights(report: ReportData, settings: ReportSettings) -> list[str]:
    insights: list[str] = []

    if report.daily_stocks:
        # max() keeps the first maximal day on ties
        best = max(report.daily_stocks, key=lambda s: s.total_packages)
        insights.append(
            f"The most productive day was {_display_day(best.date)} "
            f"with {best.total_packages} packages"
        )

    if report.trends.packages is TrendDirection.UP:
        insights.append("Volume shows a positive trend over the period")
    elif report.trends.packages is TrendDirection.DOWN:
        insights.append("Volume decreased over the period")
    else:
        insights.append("Volume remained stable over the period")

    if report.has_rosado_data and report.has_pardo_data:
        if report.rosado_percentage > settings.dominance_threshold:
            insights.append(
                f"Rosado eggs account for {report.rosado_percentage:.0f}% of total volume"
            )
        elif report.pardo_percentage > settings.dominance_threshold:
            insights.append(
                f"Pardo eggs account for {report.pardo_percentage:.0f}% of total volume"
            )
        else:
            insights.append(
                f"Volume is balanced between rosado ({report.rosado_percentage:.0f}%) "
                f"and pardo ({report.pardo_percentage:.0f}%)"
            )

    if report.suppliers:
        top = report.suppliers[0]
        insights.append(
            f"The main supplier is {top.name} with {top.total_packages} packages "
            f"({top.percentage:.1f}%)"
        )

    return insights


def build_recommendations(report: ReportData, settings: ReportSettings) -> list[str]:
    recommendations: list[str] = []

    if report.trends.packages is TrendDirection.DOWN:
        recommendations.append(
            "Review the supply process to identify opportunities for improvement"
        )
    elif report.trends.packages is TrendDirection.UP:
        recommendations.append("Keep the current practices that are driving the growth")
    else:
        recommendations.append("Look for opportunities to optimise and increase efficiency")

    if report.has_rosado_data and not report.has_pardo_data:
        recommendations.append("Consider adding pardo eggs to broaden the offer")
    elif report.has_pardo_data and not report.has_rosado_data:
        recommendations.append("Consider adding rosado eggs to broaden the offer")

    if len(report.suppliers) == 1:
        recommendations.append("Consider diversifying suppliers to reduce supply risk")
    elif len(report.suppliers) > settings.supplier_consolidation_limit:
        recommendations.append(
            "Consider consolidating with the most efficient suppliers to simplify operations"
        )

    if report.inactive_days > 0:
        recommendations.append(
            f"There are {report.inactive_days} days without activity. "
            "Consider optimising the delivery schedule"
        )

    return recommendations


def build_report(
    kind: ReportKind,
    start_date: str,
    end_date: str,
    stocks: Sequence[DailyStock],
    movements: Sequence[Movement],
    settings: ReportSettings,
    system_supplier: str,
    skipped_records: int = 0,
) -> ReportData:
    """Assemble the full report from already fetched records."""
    stocks = sorted(stocks, key=lambda s: s.date)
    kind = ReportKind(kind)
    date_range = f"{start_date} - {end_date}"

    total_packages = sum(s.total_packages for s in stocks)
    total_rosado = sum(s.rosado_packages.total_count for s in stocks)
    total_pardo = sum(s.pardo_packages.total_count for s in stocks)
    active_days = sum(1 for s in stocks if s.total_packages > 0)

    report = ReportData(
        title=f"{kind.display_name} - {date_range}",
        date_range=date_range,
        start_date=start_date,
        end_date=end_date,
        kind=kind,
        daily_stocks=list(stocks),
        movements=list(movements),
        total_packages=total_packages,
        total_weight=sum(s.total_weight for s in stocks),
        total_rosado=total_rosado,
        total_pardo=total_pardo,
        rosado_percentage=total_rosado / total_packages * 100 if total_packages else 0.0,
        pardo_percentage=total_pardo / total_packages * 100 if total_packages else 0.0,
        average_packages_per_day=total_packages // len(stocks) if stocks else 0,
        active_days=active_days,
        inactive_days=len(stocks) - active_days,
        weight_distribution=weight_distribution(stocks),
        trends=compute_trends(stocks, settings),
        chart_data=[
            ChartDataPoint(
                date=s.date,
                total_packages=s.total_packages,
                rosado_packages=s.rosado_packages.total_count,
                pardo_packages=s.pardo_packages.total_count,
            )
            for s in stocks
        ],
        skipped_records=skipped_records,
    )

    report.suppliers = rank_suppliers(movements, total_packages, system_supplier)
    report.top_suppliers = report.suppliers[: settings.top_suppliers]
    report.insights = build_insights(report, settings)
    report.recommendations = build_recommendations(report, settings)
    return report


class ReportEngine:
    """Fetches a date range through the Ledger and builds the report."""

    def __init__(self, ledger: Ledger, settings: ReportSettings | None = None) -> None:
        self._ledger = ledger
        self._settings = settings or get_settings().report

    async def generate_report(
        self, kind: ReportKind, start_date: str, end_date: str
    ) -> ReportData:
        stocks = await self._ledger.stocks_in_range(start_date, end_date)
        movements = await self._ledger.movements_in_range(start_date, end_date)

        report = build_report(
            kind,
            start_date,
            end_date,
            stocks.items,
            movements.items,
            self._settings,
            system_supplier=self._ledger.system_supplier,
            skipped_records=stocks.skipped + movements.skipped,
        )
        logger.info(
            "report_generated",
            kind=report.kind.value,
            start_date=start_date,
            end_date=end_date,
            days=len(report.daily_stocks),
            movements=len(report.movements),
            skipped=report.skipped_records,
        )
        return report

    async def generate_report_for_range(
        self,
        kind: ReportKind,
        preset: ReportDateRange,
        custom_start: date | None = None,
        custom_end: date | None = None,
    ) -> ReportData:
        today = date.fromisoformat(self._ledger.today_key())
        start, end = ReportDateRange(preset).resolve(today, custom_start, custom_end)
        return await self.generate_report(kind, start.isoformat(), end.isoformat())
