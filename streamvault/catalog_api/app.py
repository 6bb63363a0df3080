"""Application factory for the StreamVault catalog API."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routers import admin, feedback, health, seo, sessions, shows
from .settings import CatalogSettings
from .state import AppState
from .stores.catalog_store import CatalogError

logger = logging.getLogger(__name__)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Translate catalog store errors into JSON error responses."""

    if exc.status_code >= 500:
        logger.error("Catalog failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(settings: CatalogSettings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""

    resolved_settings = settings or CatalogSettings()
    app_state = AppState(settings=resolved_settings)

    app = FastAPI(title="StreamVault Catalog API", version="0.1.0")
    app.state.app_state = app_state
    app.state.settings = app_state.settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CatalogError, catalog_error_handler)

    for router in (
        health.router,
        shows.router,
        sessions.router,
        admin.router,
        feedback.router,
        seo.router,
    ):
        app.include_router(router)

    return app
