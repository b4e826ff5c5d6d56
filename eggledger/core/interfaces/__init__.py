"""Core interfaces (ports) for dependency injection."""

from eggledger.core.interfaces.document_store import (
    APP_SETTINGS,
    CARGO_ENTRIES,
    DAILY_STOCKS,
    SETTINGS_KEY,
    IDocumentStore,
    Record,
)

__all__ = [
    "IDocumentStore",
    "Record",
    "DAILY_STOCKS",
    "CARGO_ENTRIES",
    "APP_SETTINGS",
    "SETTINGS_KEY",
]
