"""API routes."""

from eggledger.api.routes.health import router as health_router
from eggledger.api.routes.movements import router as movements_router
from eggledger.api.routes.reports import router as reports_router
from eggledger.api.routes.settings import router as settings_router
from eggledger.api.routes.stock import router as stock_router

__all__ = [
    "health_router",
    "movements_router",
    "reports_router",
    "settings_router",
    "stock_router",
]
