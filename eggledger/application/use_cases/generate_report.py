"""Generate Report Use Case: analytics over a preset or custom date range."""

from eggledger.application.dto.requests import ReportRequest
from eggledger.application.dto.responses import ReportResponse
from eggledger.config import get_logger
from eggledger.core.entities import ReportData, ReportDateRange
from eggledger.core.exceptions import InvalidInputError
from eggledger.core.services import ReportEngine

logger = get_logger(__name__)


class GenerateReportUseCase:
    """Resolve the requested range and run the ReportEngine over it."""

    def __init__(self, report_engine: ReportEngine | None = None):
        self._report_engine = report_engine

    def _get_report_engine(self) -> ReportEngine:
        if self._report_engine is None:
            from eggledger.application.services import get_report_engine

            self._report_engine = get_report_engine()
        return self._report_engine

    async def execute(self, request: ReportRequest) -> ReportData:
        if request.date_range is ReportDateRange.CUSTOM:
            if request.start_date is None or request.end_date is None:
                raise InvalidInputError(
                    "date_range", "custom ranges need both start_date and end_date"
                )

        logger.info(
            "generate_report_started",
            kind=request.kind.value,
            date_range=request.date_range.value,
        )
        engine = self._get_report_engine()
        return await engine.generate_report_for_range(
            request.kind,
            request.date_range,
            custom_start=request.start_date,
            custom_end=request.end_date,
        )

    def to_response(self, report: ReportData) -> ReportResponse:
        return ReportResponse.from_entity(report)
