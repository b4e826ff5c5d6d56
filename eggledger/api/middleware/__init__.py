"""API middleware."""

from eggledger.api.middleware.error_handler import ErrorHandlerMiddleware
from eggledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
