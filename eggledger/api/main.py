"""
Egg Ledger HTTP application.

``app`` is built at import time; ``run()`` serves it with uvicorn.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eggledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from eggledger.api.middleware.error_handler import setup_exception_handlers
from eggledger.api.routes import (
    health_router,
    movements_router,
    reports_router,
    settings_router,
    stock_router,
)
from eggledger.config import configure_logging, get_logger, get_settings
from eggledger.config.settings import Settings

logger = get_logger(__name__)

ROUTERS = (health_router, stock_router, movements_router, reports_router, settings_router)


async def _open_storage(settings: Settings) -> None:
    if settings.storage.backend != "sqlite":
        return
    from eggledger.infrastructure.storage.sqlite import get_pool
    from eggledger.infrastructure.storage.sqlite.migrations import run_migrations

    results = await run_migrations()
    failed = [r.version for r in results if not r.success]
    if failed:
        raise RuntimeError(f"Migrations failed: {', '.join(failed)}")
    await get_pool()


async def _close_storage(settings: Settings) -> None:
    if settings.storage.backend != "sqlite":
        return
    from eggledger.infrastructure.storage.sqlite import close_pool

    await close_pool()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Prepare the ledger database before serving and release it afterwards."""
    settings = get_settings()
    logger.info("application_starting", backend=settings.storage.backend, port=settings.api.port)

    try:
        await _open_storage(settings)
    except Exception as e:
        logger.error("storage_init_failed", error=str(e))
        raise

    logger.info("application_started")
    try:
        yield
    finally:
        await _close_storage(settings)
        logger.info("application_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Egg Ledger API",
        description="Daily egg inventory ledger with movement history and reports",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Added last runs outermost, so request logging sees handled errors too
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """``eggledger-api`` entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "eggledger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
