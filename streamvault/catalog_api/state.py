"""Shared state container for the catalog API."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import Engine

from .db import create_engine_from_settings, init_database
from .seed import demo_catalog
from .services.email_service import EmailService
from .services.tmdb_service import TmdbService
from .settings import CatalogSettings
from .stores.catalog_store import CatalogStore
from .stores.feedback_store import FeedbackStore
from .stores.session_store import SessionStore
from .stores.token_store import AdminTokenStore


@dataclass(slots=True)
class AppState:
    """Encapsulates mutable application state shared across routers."""

    settings: CatalogSettings
    engine: Engine
    catalog_store: CatalogStore
    session_store: SessionStore
    token_store: AdminTokenStore
    feedback_store: FeedbackStore
    email_service: EmailService
    tmdb_service: TmdbService | None

    def __init__(self, settings: CatalogSettings) -> None:
        self.settings = settings
        self.engine = create_engine_from_settings(settings)
        init_database(self.engine)
        self.catalog_store = CatalogStore(
            settings.data_file,
            placeholder_thumbnail_url=settings.placeholder_thumbnail_url,
            seed=demo_catalog() if settings.seed_demo_data else None,
        )
        self.session_store = SessionStore()
        self.token_store = AdminTokenStore()
        self.feedback_store = FeedbackStore(self.engine)
        self.email_service = EmailService(
            api_key=settings.resend_api_key,
            admin_email=settings.admin_email,
            sender=settings.email_from,
            timeout=settings.http_timeout,
        )
        self.tmdb_service = (
            TmdbService(
                settings.tmdb_api_key,
                base_url=settings.tmdb_base_url,
                image_base_url=settings.tmdb_image_base_url,
                timeout=settings.http_timeout,
            )
            if settings.tmdb_api_key
            else None
        )
