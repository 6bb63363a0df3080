"""Runtime configuration for the catalog API."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogSettings(BaseSettings):
    """Environment-aware settings for the StreamVault catalog service."""

    data_file: str = Field(
        default="./data/streamvault-data.json",
        description="JSON file holding the persisted show and episode catalog.",
    )
    seed_demo_data: bool = Field(
        default=False,
        description="Seed a small demo catalog when the data file does not exist yet.",
    )
    base_url: str = Field(
        default="https://streamvault.live",
        description="Public site URL used for sitemap entries and social meta tags.",
    )
    admin_username: str = Field(default="admin", description="Username accepted by the admin login.")
    admin_password: str = Field(
        default="streamvault2024", description="Password accepted by the admin login."
    )
    database_url: str = Field(
        default="sqlite:///./data/feedback.db",
        description="Connection URL for the feedback SQLite database.",
    )
    database_echo: bool = Field(
        default=False, description="Enable SQL echo for debugging queries."
    )
    tmdb_api_key: str | None = Field(
        default=None, description="Optional TMDB API key enabling show creation from TMDB."
    )
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3", description="Base URL of the TMDB v3 API."
    )
    tmdb_image_base_url: str = Field(
        default="https://image.tmdb.org/t/p", description="Base URL for TMDB image paths."
    )
    resend_api_key: str | None = Field(
        default=None,
        description="Optional Resend API key; notifications are logged when it is missing.",
    )
    admin_email: str = Field(
        default="contact@streamvault.live",
        description="Recipient of content request and issue report notifications.",
    )
    email_from: str = Field(
        default="StreamVault <noreply@streamvault.live>",
        description="Sender used for outbound notification email.",
    )
    placeholder_thumbnail_url: str = Field(
        default="https://images.unsplash.com/photo-1574267432644-f65e2d32b5c1?w=1280&h=720&fit=crop",
        description="Thumbnail used when an episode has neither a thumbnail nor a derivable one.",
    )
    index_html_path: str | None = Field(
        default=None,
        description="Built client index.html used to serve pages with injected meta tags.",
    )
    indexnow_endpoint: str = Field(
        default="https://www.bing.com/indexnow",
        description="IndexNow endpoint receiving sitemap URL submissions.",
    )
    http_timeout: float = Field(
        default=10.0, description="Timeout in seconds for outbound HTTP calls."
    )

    model_config = SettingsConfigDict(
        env_prefix="STREAMVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
