"""Report endpoints."""

from fastapi import APIRouter, Depends

from eggledger.api.dependencies import get_generate_report_use_case
from eggledger.application.dto.requests import ReportRequest
from eggledger.application.dto.responses import ErrorResponse, ReportResponse
from eggledger.application.use_cases import GenerateReportUseCase

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post(
    "",
    response_model=ReportResponse,
    responses={400: {"model": ErrorResponse}},
)
async def generate_report(
    request: ReportRequest,
    use_case: GenerateReportUseCase = Depends(get_generate_report_use_case),
) -> ReportResponse:
    """Build a report over a preset or custom date range."""
    report = await use_case.execute(request)
    return use_case.to_response(report)
