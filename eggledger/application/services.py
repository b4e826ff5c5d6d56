"""
Service factory functions for dependency injection.

This module wires the configured document store into the core services.
Use cases and API dependencies import from here.
"""

from typing import TYPE_CHECKING

from eggledger.core.services import Ledger, ReportEngine

if TYPE_CHECKING:
    from eggledger.core.interfaces import IDocumentStore


# Singleton service instances
_ledger: Ledger | None = None
_report_engine: ReportEngine | None = None


def get_ledger(document_store: "IDocumentStore | None" = None) -> Ledger:
    """
    Get or create the Ledger.

    Passing a store builds a fresh Ledger around it and makes it the
    shared instance.
    """
    global _ledger, _report_engine

    if _ledger is not None and document_store is None:
        return _ledger

    # Lazy import infrastructure to avoid circular imports
    if document_store is None:
        from eggledger.infrastructure.storage import get_document_store

        document_store = get_document_store()

    _ledger = Ledger(document_store)
    _report_engine = None
    return _ledger


def get_report_engine(ledger: Ledger | None = None) -> ReportEngine:
    """Get or create the ReportEngine bound to the shared Ledger."""
    global _report_engine

    if _report_engine is not None and ledger is None:
        return _report_engine

    _report_engine = ReportEngine(ledger or get_ledger())
    return _report_engine


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _ledger, _report_engine
    _ledger = None
    _report_engine = None
