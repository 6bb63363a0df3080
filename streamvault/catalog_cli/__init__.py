"""Command line interface for the StreamVault catalog API."""
from .app import app

__all__ = ["app"]
