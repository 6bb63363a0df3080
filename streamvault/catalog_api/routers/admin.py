"""Admin authentication, catalog editing and import endpoints."""
from __future__ import annotations

import json
import logging
import secrets
from datetime import date
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from ..dependencies import (
    get_admin_token,
    get_catalog_store,
    get_feedback_store,
    get_settings,
    get_tmdb_service,
    get_token_store,
    require_admin,
)
from ..schemas import (
    BulkEpisodesRequest,
    ContentRequestModel,
    DeleteResult,
    EpisodeCreate,
    EpisodeModel,
    EpisodeUpdate,
    ImportFileRequest,
    ImportResult,
    ImportSummary,
    IssueReportModel,
    LoginRequest,
    LoginResponse,
    ShowCreate,
    ShowModel,
    ShowUpdate,
    StatusResponse,
    TmdbShowRequest,
    VerifyResponse,
)
from ..services.tmdb_service import TmdbNotFoundError, TmdbService, TmdbServiceError
from ..settings import CatalogSettings
from ..stores.catalog_store import CatalogStore
from ..stores.feedback_store import FeedbackStore
from ..stores.token_store import AdminTokenStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])
protected = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    settings: CatalogSettings = Depends(get_settings),
    token_store: AdminTokenStore = Depends(get_token_store),
) -> LoginResponse:
    """Exchange admin credentials for a bearer token."""

    username_ok = secrets.compare_digest(credentials.username, settings.admin_username)
    password_ok = secrets.compare_digest(credentials.password, settings.admin_password)
    if not (username_ok and password_ok):
        logger.warning("Rejected admin login for %r", credentials.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return LoginResponse(token=token_store.issue())


@router.post("/logout", response_model=StatusResponse)
def logout(
    token: str | None = Depends(get_admin_token),
    token_store: AdminTokenStore = Depends(get_token_store),
) -> StatusResponse:
    token_store.revoke(token)
    return StatusResponse(message="Logged out")


@router.get("/verify", response_model=VerifyResponse)
def verify(
    token: str | None = Depends(get_admin_token),
    token_store: AdminTokenStore = Depends(get_token_store),
) -> VerifyResponse:
    return VerifyResponse(valid=token_store.is_valid(token))


# Shows


@protected.post("/shows", response_model=ShowModel, status_code=201)
def create_show(payload: ShowCreate, store: CatalogStore = Depends(get_catalog_store)) -> ShowModel:
    return store.create_show(payload)


@protected.post("/shows/tmdb", response_model=ShowModel, status_code=201)
def create_show_from_tmdb(
    lookup: TmdbShowRequest,
    tmdb: TmdbService = Depends(get_tmdb_service),
    store: CatalogStore = Depends(get_catalog_store),
) -> ShowModel:
    """Create a show from TMDB metadata looked up by id or title."""

    try:
        payload = tmdb.show_from_tmdb(title=lookup.title, tmdb_id=lookup.tmdb_id)
    except TmdbNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TmdbServiceError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return store.create_show(payload)


@protected.put("/shows/{show_id}", response_model=ShowModel)
def update_show(
    show_id: str, patch: ShowUpdate, store: CatalogStore = Depends(get_catalog_store)
) -> ShowModel:
    """Merge the supplied fields into an existing show."""

    return store.update_show(show_id, patch)


@protected.delete("/shows", response_model=DeleteResult)
def delete_all_shows(store: CatalogStore = Depends(get_catalog_store)) -> DeleteResult:
    return DeleteResult(deleted=store.delete_all_shows())


@protected.delete("/shows/{show_id}", response_model=DeleteResult)
def delete_show(show_id: str, store: CatalogStore = Depends(get_catalog_store)) -> DeleteResult:
    """Delete a show together with all of its episodes."""

    return DeleteResult(deleted=store.delete_show(show_id))


@protected.delete("/shows/{show_id}/seasons/{season}", response_model=DeleteResult)
def delete_season(
    show_id: str, season: int, store: CatalogStore = Depends(get_catalog_store)
) -> DeleteResult:
    return DeleteResult(deleted=store.delete_season(show_id, season), season=season)


# Episodes


@protected.post("/episodes", response_model=EpisodeModel, status_code=201)
def create_episode(
    payload: EpisodeCreate, store: CatalogStore = Depends(get_catalog_store)
) -> EpisodeModel:
    return store.create_episode(payload)


@protected.post("/episodes/bulk", response_model=ImportResult)
def bulk_add_episodes(
    body: BulkEpisodesRequest, store: CatalogStore = Depends(get_catalog_store)
) -> ImportResult:
    """Add many episodes to one show, skipping season/episode pairs that already exist."""

    return store.import_episodes(
        body.slug, body.episodes, default_air_date=date.today().isoformat()
    )


@protected.put("/episodes/{episode_id}", response_model=EpisodeModel)
def update_episode(
    episode_id: str, patch: EpisodeUpdate, store: CatalogStore = Depends(get_catalog_store)
) -> EpisodeModel:
    return store.update_episode(episode_id, patch)


@protected.delete("/episodes/{episode_id}", response_model=StatusResponse)
def delete_episode(
    episode_id: str, store: CatalogStore = Depends(get_catalog_store)
) -> StatusResponse:
    store.delete_episode(episode_id)
    return StatusResponse()


# Imports


@protected.post("/import", response_model=ImportSummary)
def import_catalog(
    payload: dict[str, Any] = Body(..., description="Single-show or multi-show export."),
    create_missing_shows: bool = Query(default=False, alias="createMissingShows"),
    store: CatalogStore = Depends(get_catalog_store),
) -> ImportSummary:
    return store.import_catalog_export(payload, create_missing_shows=create_missing_shows)


@protected.post("/import-file", response_model=ImportSummary)
def import_catalog_file(
    body: ImportFileRequest, store: CatalogStore = Depends(get_catalog_store)
) -> ImportSummary:
    """Import a catalog export stored on the server's filesystem."""

    path = Path(body.file_path).expanduser()
    if not path.is_file():
        raise HTTPException(status_code=404, detail=f"File not found: {body.file_path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid JSON file: {exc}") from exc
    except OSError as exc:
        logger.warning("Unable to read import file %s: %s", path, exc)
        raise HTTPException(status_code=400, detail=f"Unable to read file: {body.file_path}") from exc
    logger.info("Importing catalog export from %s", path)
    return store.import_catalog_export(payload, create_missing_shows=body.create_missing_shows)


# Feedback review


@protected.get("/content-requests", response_model=list[ContentRequestModel])
def list_content_requests(
    limit: int = Query(default=100, ge=1, le=500),
    store: FeedbackStore = Depends(get_feedback_store),
) -> list[ContentRequestModel]:
    return store.list_content_requests(limit=limit)


@protected.get("/issue-reports", response_model=list[IssueReportModel])
def list_issue_reports(
    limit: int = Query(default=100, ge=1, le=500),
    status: str | None = Query(default=None, description="Only reports with this status."),
    store: FeedbackStore = Depends(get_feedback_store),
) -> list[IssueReportModel]:
    return store.list_issue_reports(limit=limit, status=status)


router.include_router(protected)
