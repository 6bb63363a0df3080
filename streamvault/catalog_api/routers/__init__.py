"""Router exports for the catalog API."""
from . import admin, feedback, health, sessions, seo, shows

__all__ = ["admin", "feedback", "health", "sessions", "seo", "shows"]
