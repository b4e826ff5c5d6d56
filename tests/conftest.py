"""Pytest configuration and fixtures."""

import os
from datetime import date

import pytest

from eggledger.application.services import reset_services
from eggledger.config import LedgerSettings, ReportSettings, reset_settings
from eggledger.core.services import Ledger, ReportEngine
from eggledger.infrastructure.storage.memory import InMemoryDocumentStore

# Importing the app builds settings; keep it from creating a data directory
os.environ.setdefault("STORAGE_BACKEND", "memory")

TODAY = date(2024, 3, 15)


class FakeClock:
    """Callable returning a settable business date."""

    def __init__(self, today: date = TODAY):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture(autouse=True)
def reset_singletons():
    """Every test starts from fresh settings and service singletons."""
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def report_settings() -> ReportSettings:
    return ReportSettings()


@pytest.fixture
def ledger(store: InMemoryDocumentStore, clock: FakeClock, ledger_settings: LedgerSettings) -> Ledger:
    return Ledger(store, today=clock, settings=ledger_settings)


@pytest.fixture
def report_engine(ledger: Ledger, report_settings: ReportSettings) -> ReportEngine:
    return ReportEngine(ledger, settings=report_settings)
