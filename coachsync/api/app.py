"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from coachsync.api.coaches import router as coaches_router
from coachsync.api.matches import router as matches_router
from coachsync.api.players import router as players_router
from coachsync.api.realtime import router as realtime_router
from coachsync.api.scores import router as scores_router
from coachsync.config.settings import Settings
from coachsync.config.settings import settings as default_settings
from coachsync.core.errors import InvalidInputError, NotFoundError, StoreError, ValidationError
from coachsync.core.logger import setup_logger
from coachsync.matches.service import MatchService
from coachsync.players.roster import RosterService
from coachsync.store import BaseDocumentStore, SqlDocumentStore, build_store
from coachsync.sync.manager import SyncManager

UNAVAILABLE_CODES = {"unavailable", "deadline-exceeded"}
FORBIDDEN_CODES = {"permission-denied", "unauthenticated"}


def store_error_status(code: str) -> int:
    """HTTP status for a store error code."""
    if code in UNAVAILABLE_CODES:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if code in FORBIDDEN_CODES:
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": exc.errors},
    )


async def _invalid_input_handler(_request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error(f"[API] Store error on {request.method} {request.url.path}: {exc.code} {exc}")
    return JSONResponse(
        status_code=store_error_status(exc.code),
        content={"detail": str(exc), "code": exc.code},
    )


def create_app(store: BaseDocumentStore | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the API with services wired to one store.

    Args:
        store: Document store; built from settings when omitted
        settings: Application settings; module defaults when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings
    setup_logger(settings)
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"[API] Starting with {store.name} store")
        yield
        app.state.sync_manager.unsubscribe_all()
        if isinstance(store, SqlDocumentStore):
            store.dispose()
        logger.info("[API] Shutdown complete")

    app = FastAPI(title="coachsync", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.match_service = MatchService(store, settings=settings)
    app.state.roster_service = RosterService(store)
    app.state.sync_manager = SyncManager(store, settings=settings)

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(InvalidInputError, _invalid_input_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(StoreError, _store_error_handler)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "store": store.name}

    app.include_router(matches_router)
    app.include_router(players_router)
    app.include_router(coaches_router)
    app.include_router(scores_router)
    app.include_router(realtime_router)
    return app
