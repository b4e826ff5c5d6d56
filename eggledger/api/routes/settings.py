"""App settings endpoints (company details, supplier memory, display defaults)."""

from fastapi import APIRouter, Depends

from eggledger.api.dependencies import get_ledger_dep
from eggledger.application.dto.requests import SettingsUpdateRequest
from eggledger.application.dto.responses import SettingsResponse
from eggledger.core.services import Ledger

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
async def get_app_settings(ledger: Ledger = Depends(get_ledger_dep)) -> SettingsResponse:
    settings = await ledger.load_settings()
    return SettingsResponse.from_entity(settings)


@router.put("", response_model=SettingsResponse)
async def update_app_settings(
    request: SettingsUpdateRequest,
    ledger: Ledger = Depends(get_ledger_dep),
) -> SettingsResponse:
    """Merge the provided fields into the stored settings."""
    current = await ledger.load_settings()
    updated = current.model_copy(update=request.model_dump(exclude_none=True))
    await ledger.update_settings(updated)
    return SettingsResponse.from_entity(updated)
