"""Service layer exports for the catalog API."""
from .email_service import EmailMessage, EmailService
from .indexnow import (
    IndexNowClient,
    IndexNowError,
    IndexNowResult,
    extract_sitemap_urls,
    load_or_create_key,
)
from .tmdb_service import TmdbNotFoundError, TmdbService, TmdbServiceError, generate_slug

__all__ = [
    "EmailMessage",
    "EmailService",
    "IndexNowClient",
    "IndexNowError",
    "IndexNowResult",
    "TmdbNotFoundError",
    "TmdbService",
    "TmdbServiceError",
    "extract_sitemap_urls",
    "generate_slug",
    "load_or_create_key",
]
