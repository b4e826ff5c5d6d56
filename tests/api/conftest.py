"""Fixtures for API tests: the app wired to an in-memory ledger."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from eggledger.api.dependencies import get_ledger_dep
from eggledger.api.main import app
from eggledger.core.services import Ledger


@pytest.fixture
async def client(ledger: Ledger) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_ledger_dep] = lambda: ledger
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_ledger_dep, None)

