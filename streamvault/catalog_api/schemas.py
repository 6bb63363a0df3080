"""Pydantic models exposed by the catalog API and persisted in the catalog file."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _join_legacy_list(value: Any) -> Any:
    """Collapse legacy array-typed text fields into a comma-separated string."""

    if isinstance(value, (list, tuple)):
        return ", ".join(str(item).strip() for item in value if str(item).strip())
    return value


def _stringify_rating(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


CsvText = Annotated[str, BeforeValidator(_join_legacy_list)]
OptionalCsvText = Annotated[str | None, BeforeValidator(_join_legacy_list)]
RatingText = Annotated[str | None, BeforeValidator(_stringify_rating)]

VIDEO_URL_ALIASES = AliasChoices("videoUrl", "googleDriveUrl", "video_url")


class CamelModel(BaseModel):
    """Base model using camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthStatus(BaseModel):
    """Service health payload."""

    status: Literal["ok"] = Field(default="ok")
    version: str = Field(default="0.1.0", description="Semantic version of the API service.")
    shows: int = Field(default=0, description="Number of shows currently in the catalog.")
    episodes: int = Field(default=0, description="Number of episodes currently in the catalog.")


class Category(CamelModel):
    """Navigation category used to filter the catalog."""

    id: str
    name: str
    slug: str


class ShowModel(CamelModel):
    """A series entity as stored in the catalog file and returned by the API."""

    id: str
    title: str
    slug: str
    description: str = ""
    poster_url: str = ""
    backdrop_url: str = ""
    year: int | None = None
    rating: str = "NR"
    imdb_rating: RatingText = None
    genres: CsvText = ""
    language: str = ""
    total_seasons: int = 0
    cast: OptionalCsvText = None
    creators: OptionalCsvText = None
    featured: bool = False
    trending: bool = False
    category: str | None = None


class ShowCreate(CamelModel):
    """Payload accepted when creating a show."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, description="Unique URL-safe identifier.")
    description: str
    poster_url: str
    backdrop_url: str
    year: int = Field(..., ge=1800, le=3000)
    rating: str = Field(..., description="Content rating such as TV-14 or TV-MA.")
    imdb_rating: RatingText = None
    genres: CsvText
    language: str
    total_seasons: int = Field(..., ge=0)
    cast: OptionalCsvText = None
    creators: OptionalCsvText = None
    featured: bool = False
    trending: bool = False
    category: str | None = None


class ShowUpdate(CamelModel):
    """Partial update for a show; omitted fields keep their stored value."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1)
    slug: str | None = Field(default=None, min_length=1)
    description: str | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None
    year: int | None = Field(default=None, ge=1800, le=3000)
    rating: str | None = None
    imdb_rating: RatingText = None
    genres: OptionalCsvText = None
    language: str | None = None
    total_seasons: int | None = Field(default=None, ge=0)
    cast: OptionalCsvText = None
    creators: OptionalCsvText = None
    featured: bool | None = None
    trending: bool | None = None
    category: str | None = None


class EpisodeModel(CamelModel):
    """A playable episode owned by a single show."""

    id: str
    show_id: str
    season: int
    episode_number: int
    title: str = ""
    description: str = ""
    thumbnail_url: str = ""
    duration: int = Field(default=0, description="Runtime in minutes.")
    video_url: str = Field(default="", validation_alias=VIDEO_URL_ALIASES)
    air_date: str | None = None


class EpisodeCreate(CamelModel):
    """Payload accepted when creating a single episode."""

    show_id: str = Field(..., min_length=1)
    season: int = Field(..., ge=0)
    episode_number: int = Field(..., ge=0)
    title: str = Field(..., min_length=1)
    description: str = ""
    thumbnail_url: str | None = None
    duration: int = Field(default=45, ge=0)
    video_url: str = Field(..., min_length=1, validation_alias=VIDEO_URL_ALIASES)
    air_date: str | None = None


class EpisodeUpdate(CamelModel):
    """Partial update for an episode; the owning show cannot be changed."""

    season: int | None = Field(default=None, ge=0)
    episode_number: int | None = Field(default=None, ge=0)
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    thumbnail_url: str | None = None
    duration: int | None = Field(default=None, ge=0)
    video_url: str | None = Field(default=None, validation_alias=VIDEO_URL_ALIASES)
    air_date: str | None = None


class EpisodeImportRow(CamelModel):
    """One episode row of a bulk import payload."""

    season: int = Field(..., ge=0, validation_alias=AliasChoices("season", "seasonNumber"))
    episode_number: int = Field(
        ..., ge=0, validation_alias=AliasChoices("episodeNumber", "episode_number", "episode")
    )
    title: str | None = None
    description: str | None = None
    duration: int | None = Field(default=None, ge=0)
    video_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "videoUrl", "googleDriveUrl", "embed_url", "embedUrl", "video_url"
        ),
    )
    thumbnail_url: str | None = None
    air_date: str | None = None


class BulkEpisodesRequest(CamelModel):
    """Episodes to add to the show identified by ``slug``."""

    slug: str = Field(..., min_length=1)
    episodes: list[EpisodeImportRow]


class ImportResult(CamelModel):
    """Outcome of importing episode rows into one show."""

    success: bool = True
    show: str = Field(description="Title of the show receiving the episodes.")
    show_id: str
    added: int = 0
    skipped: int = 0
    total: int = 0
    total_seasons: int = Field(description="Season count of the show after reconciliation.")


class ScrapedEpisode(CamelModel):
    """Episode entry of a multi-show scraper export."""

    episode: int = Field(..., ge=0)
    embed_url: str = Field(default="", validation_alias=AliasChoices("embed_url", "embedUrl"))


class ScrapedShow(CamelModel):
    """Show entry of a multi-show scraper export keyed by ``season_N``."""

    title: str
    slug: str
    seasons: dict[str, list[ScrapedEpisode]] = Field(default_factory=dict)


class SingleShowExport(CamelModel):
    """Import file targeting one existing show by slug."""

    show_slug: str = Field(..., min_length=1)
    episodes: list[EpisodeImportRow]


class MultiShowExport(CamelModel):
    """Scraper export describing several shows and their seasons."""

    shows: list[ScrapedShow]


class ImportFileRequest(CamelModel):
    """Request to import a catalog export from a file on the server."""

    file_path: str = Field(..., min_length=1)
    create_missing_shows: bool = Field(
        default=False, description="Create shows that are not in the catalog yet."
    )


class ImportSummary(CamelModel):
    """Aggregate outcome of importing a catalog export."""

    success: bool = True
    message: str = "Import completed successfully"
    shows_created: int = 0
    shows_matched: int = 0
    shows_not_found: int = 0
    not_found_shows: list[str] = Field(default_factory=list)
    episodes_imported: int = 0
    episodes_skipped: int = 0
    total_episodes: int = 0


class DeleteResult(CamelModel):
    """Acknowledgement for delete operations."""

    success: bool = True
    deleted: int = 0
    season: int | None = None


class StatusResponse(CamelModel):
    """Generic acknowledgement."""

    success: bool = True
    message: str | None = None


class WatchlistItem(CamelModel):
    """Watchlist addition submitted by a session."""

    show_id: str = Field(..., min_length=1)
    added_at: datetime | None = None


class WatchlistEntry(CamelModel):
    """Watchlist entry stored for a session."""

    id: str
    show_id: str
    added_at: datetime


class ViewingProgress(CamelModel):
    """Playback position reported by a session."""

    show_id: str = Field(..., min_length=1)
    episode_id: str = Field(..., min_length=1)
    season: int = Field(..., ge=0)
    episode_number: int = Field(..., ge=0)
    progress: float = Field(..., ge=0, le=100, description="Percentage watched.")
    last_watched: datetime | None = None


class ProgressEntry(CamelModel):
    """Most recent playback position of a session for one show."""

    id: str
    show_id: str
    episode_id: str
    season: int
    episode_number: int
    progress: float
    last_watched: datetime


class LoginRequest(BaseModel):
    """Admin credentials."""

    username: str
    password: str


class LoginResponse(BaseModel):
    """Token issued after a successful admin login."""

    success: bool = True
    token: str
    message: str = "Login successful"


class VerifyResponse(BaseModel):
    """Whether the presented admin token is currently valid."""

    valid: bool


class TmdbShowRequest(CamelModel):
    """Create a show from TMDB metadata by title or TMDB id."""

    title: str | None = Field(default=None, min_length=1)
    tmdb_id: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _require_lookup_key(self) -> "TmdbShowRequest":
        if self.title is None and self.tmdb_id is None:
            raise ValueError("Either title or tmdbId is required")
        return self


class ContentRequestCreate(CamelModel):
    """User request for a title to be added to the catalog."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content_type: str = Field(..., min_length=1, description="Kind of content, e.g. series or movie.")
    title: str = Field(..., min_length=1)
    year: Annotated[str | None, BeforeValidator(_stringify_rating)] = None
    genre: str | None = None
    description: str | None = None
    reason: str | None = None
    email: str | None = None


class ContentRequestModel(ContentRequestCreate):
    """Persisted content request with its deduplicated request counter."""

    id: str
    request_count: int = 1
    created_at: datetime
    updated_at: datetime


class ContentRequestReceipt(CamelModel):
    """Response returned after submitting a content request."""

    success: bool = True
    message: str = "Content request submitted successfully"
    request_count: int


class IssueReportCreate(CamelModel):
    """User report about broken playback or wrong metadata."""

    model_config = ConfigDict(str_strip_whitespace=True)

    issue_type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    url: str | None = None
    email: str | None = None


class IssueReportModel(IssueReportCreate):
    """Persisted issue report."""

    id: str
    status: str = "open"
    created_at: datetime


class IssueReportReceipt(CamelModel):
    """Response returned after submitting an issue report."""

    success: bool = True
    message: str = "Report submitted successfully"
    report_id: str
