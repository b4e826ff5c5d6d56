"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends

from eggledger.api.dependencies import get_app_settings, get_ledger_dep
from eggledger.application.dto.responses import HealthResponse
from eggledger.config import Settings, get_logger
from eggledger.core.exceptions import PersistenceUnavailableError
from eggledger.core.services import Ledger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    ledger: Ledger = Depends(get_ledger_dep),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """
    Service status plus a read probe against the storage backend.

    The probe reads today's stock without creating it.
    """
    storage_ok = True
    try:
        await ledger.get_stock(ledger.today_key())
    except PersistenceUnavailableError as e:
        logger.warning("health_storage_unavailable", error=str(e))
        storage_ok = False

    return HealthResponse(
        status="healthy" if storage_ok else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        storage_backend=settings.storage.backend,
        storage_ok=storage_ok,
    )
