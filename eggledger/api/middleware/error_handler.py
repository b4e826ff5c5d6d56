"""
Error responses for the ledger API.

Every failure leaves the API as an ``ErrorResponse`` body carrying a
machine-readable ``error_code``, a ``message`` and, where one is known, a
recovery ``hint``.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from eggledger.application.dto.responses import ErrorResponse
from eggledger.config import get_logger
from eggledger.core.exceptions import (
    DecodeFailureError,
    InvalidInputError,
    LedgerError,
    NotFoundError,
    PersistenceUnavailableError,
)

logger = get_logger(__name__)

# Checked in order, so subclasses come before their bases
EXCEPTION_STATUS_MAP: tuple[tuple[type[Exception], int], ...] = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PersistenceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DecodeFailureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ValueError, status.HTTP_400_BAD_REQUEST),
)

HINTS: dict[str | int, str] = {
    "DAILY_STOCK_NOT_FOUND": "No stock exists for that date. See GET /api/stock/history for recorded days.",
    "INVALID_INPUT": "Weight classes run 7-13 with ten counters each; dates are YYYY-MM-DD.",
    "PERSISTENCE_UNAVAILABLE": "The storage backend is unreachable. Retry later.",
    "DECODE_FAILURE": "A stored record is corrupt. The server log names its id.",
    "VALIDATION_ERROR": "Check the request body fields and types.",
    status.HTTP_400_BAD_REQUEST: "Check the request parameters and body.",
    status.HTTP_404_NOT_FOUND: "The requested resource was not found.",
    status.HTTP_405_METHOD_NOT_ALLOWED: "This path does not accept that HTTP method.",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "An internal error occurred. Check server logs.",
}

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def _hint(error_code: str, status_code: int) -> str | None:
    return HINTS.get(error_code) or HINTS.get(status_code)


def _status_for(exc: Exception) -> int:
    for exc_type, status_code in EXCEPTION_STATUS_MAP:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _respond(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_hint(error_code, status_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Map a ledger (or unexpected) exception onto its HTTP error response."""
    status_code = _status_for(exc)
    if isinstance(exc, LedgerError):
        error_code, message = exc.code, exc.message
    else:
        error_code, message = type(exc).__name__, str(exc)

    if status_code >= 500:
        logger.error("request_error", status=status_code, error_code=error_code, exc_info=exc)
    else:
        logger.warning("request_error", status=status_code, error_code=error_code, error=message)
    return _respond(request, status_code, error_code, message)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Converts exceptions that escaped every registered handler."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return error_response(request, e)


async def _ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
    return error_response(request, exc)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning("request_validation_failed", problems=problems)
    return _respond(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        detail=problems,
    )


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return _respond(request, exc.status_code, error_code, str(exc.detail or "An error occurred"))


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, _ledger_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(HTTPException, _http_error)
