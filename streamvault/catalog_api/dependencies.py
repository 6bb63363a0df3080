"""FastAPI dependencies for the catalog API."""
from fastapi import Depends, Header, HTTPException, Request

from .services.email_service import EmailService
from .services.tmdb_service import TmdbService
from .settings import CatalogSettings
from .state import AppState
from .stores.catalog_store import CatalogStore
from .stores.feedback_store import FeedbackStore
from .stores.session_store import SessionStore
from .stores.token_store import AdminTokenStore

DEFAULT_SESSION_ID = "default-session"


def get_app_state(request: Request) -> AppState:
    """Resolve the shared application state from the FastAPI request."""
    return request.app.state.app_state


def get_settings(app_state: AppState = Depends(get_app_state)) -> CatalogSettings:
    return app_state.settings


def get_catalog_store(app_state: AppState = Depends(get_app_state)) -> CatalogStore:
    """Return the catalog store dependency."""
    return app_state.catalog_store


def get_session_store(app_state: AppState = Depends(get_app_state)) -> SessionStore:
    return app_state.session_store


def get_token_store(app_state: AppState = Depends(get_app_state)) -> AdminTokenStore:
    return app_state.token_store


def get_feedback_store(app_state: AppState = Depends(get_app_state)) -> FeedbackStore:
    return app_state.feedback_store


def get_email_service(app_state: AppState = Depends(get_app_state)) -> EmailService:
    return app_state.email_service


def get_tmdb_service(app_state: AppState = Depends(get_app_state)) -> TmdbService:
    """Return the TMDB client, failing with 503 when no API key is configured."""

    if app_state.tmdb_service is None:
        raise HTTPException(status_code=503, detail="TMDB API key is not configured")
    return app_state.tmdb_service


def get_session_id(x_session_id: str | None = Header(default=None)) -> str:
    """Return the caller's session id, falling back to the shared default session."""

    return x_session_id or DEFAULT_SESSION_ID


def get_admin_token(x_admin_token: str | None = Header(default=None)) -> str | None:
    return x_admin_token


def require_admin(
    token: str | None = Depends(get_admin_token),
    token_store: AdminTokenStore = Depends(get_token_store),
) -> str:
    """Reject the request unless it carries a valid admin token."""

    if not token_store.is_valid(token):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return token
