"""
Domain exceptions for the egg ledger.

Every error raised by the core derives from ``LedgerError`` and carries a
machine-readable ``code`` plus structured ``details``.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for persistence operations."""

    pass


class PersistenceUnavailableError(StorageError):
    """The persistence collaborator could not be reached or failed."""

    def __init__(self, operation: str, error: str, collection: str | None = None):
        super().__init__(
            f"Persistence unavailable during {operation}: {error}",
            code="PERSISTENCE_UNAVAILABLE",
            details={"operation": operation, "collection": collection, "error": error},
        )


class NotFoundError(StorageError):
    """No record exists for the requested key."""

    def __init__(
        self,
        collection: str,
        key: str,
        message: str | None = None,
        code: str = "NOT_FOUND",
    ):
        super().__init__(
            message or f"No record '{key}' in {collection}",
            code=code,
            details={"collection": collection, "key": key},
        )


class DailyStockNotFoundError(NotFoundError):
    """No daily stock exists for the requested date."""

    def __init__(self, date: str):
        super().__init__(
            "daily_stocks",
            date,
            message=f"Daily stock not found: {date}",
            code="DAILY_STOCK_NOT_FOUND",
        )


class DecodeFailureError(StorageError):
    """A stored record could not be parsed into the expected shape."""

    def __init__(self, collection: str, record_id: str | None, reason: str):
        super().__init__(
            f"Cannot decode {collection} record {record_id or '<unknown>'}: {reason}",
            code="DECODE_FAILURE",
            details={"collection": collection, "record_id": record_id, "reason": reason},
        )


# Validation Exceptions
class InvalidInputError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Invalid input for '{field}': {message}",
            code="INVALID_INPUT",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
