"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan owns the store and hub: opened at startup, closed at
shutdown, reachable by routes through app.state.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from receipt import __version__
from receipt.api import api_router
from receipt.config import Settings, settings as default_settings
from receipt.db.store import EntryStore
from receipt.errors import StorageError, ValidationError
from receipt.log import configure_logging
from receipt.middleware.request_id import RequestIdMiddleware
from receipt.realtime.hub import BroadcastHub
from receipt.realtime.websocket import router as ws_router
from receipt.services.entry_service import EntryService

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. A failed legacy migration raises MigrationError here and the
    server refuses to start.
    """
    cfg: Settings = app.state.settings
    logger.info(
        "receipt.starting",
        version=__version__,
        environment=cfg.environment,
        port=cfg.port,
    )

    store = EntryStore(cfg.database_url, echo=cfg.debug)
    await store.open(migrate_legacy=cfg.migrate_legacy_ids)
    hub = BroadcastHub()

    app.state.store = store
    app.state.hub = hub
    app.state.entry_service = EntryService(store, hub)

    yield

    logger.info("receipt.shutdown")
    await hub.close()
    await store.close()


async def _validation_error_handler(request: Request, exc: ValidationError):
    logger.info("receipt.bad_request", error=str(exc))
    return JSONResponse(status_code=400, content={"error": f"Bad Request: {exc}"})


async def _storage_error_handler(request: Request, exc: StorageError):
    logger.error("receipt.storage_error", error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal storage error"})


def _not_found_handler(frontend_index):
    """404s: JSON under /api/, the SPA shell elsewhere (if a bundle is configured).

    Under /api/ a wrong method (405) is reported as an unknown endpoint too.
    """

    async def handler(request: Request, exc: StarletteHTTPException):
        is_api = request.url.path.startswith("/api/")
        if exc.status_code == 405 and is_api:
            return JSONResponse(status_code=404, content={"error": "API endpoint not found"})
        if exc.status_code != 404:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": exc.detail},
                headers=getattr(exc, "headers", None),
            )
        if is_api:
            return JSONResponse(status_code=404, content={"error": "API endpoint not found"})
        if frontend_index is not None:
            return FileResponse(frontend_index)
        return JSONResponse(status_code=404, content={"error": "Not found"})

    return handler


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    cfg = settings or default_settings
    configure_logging(cfg.log_level, json=cfg.log_json)

    app = FastAPI(
        title="Receipt",
        description="Running log of short text entries with a live WebSocket feed",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = cfg

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → handler
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)

    app.include_router(api_router)
    app.include_router(ws_router)

    frontend_index = None
    if cfg.frontend_dir is not None:
        frontend_index = cfg.frontend_dir / "index.html"
        app.mount("/", StaticFiles(directory=cfg.frontend_dir, html=True), name="frontend")

    app.add_exception_handler(StarletteHTTPException, _not_found_handler(frontend_index))

    return app


# Default app instance (used by uvicorn: receipt.main:app)
app = create_app()
