"""Per-session watchlist and viewing progress endpoints."""
from fastapi import APIRouter, Depends

from ..dependencies import get_session_id, get_session_store
from ..schemas import (
    ProgressEntry,
    StatusResponse,
    ViewingProgress,
    WatchlistEntry,
    WatchlistItem,
)
from ..stores.session_store import SessionStore

router = APIRouter(prefix="/api", tags=["sessions"])


@router.get("/watchlist", response_model=list[WatchlistEntry])
def get_watchlist(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> list[WatchlistEntry]:
    return store.get_watchlist(session_id)


@router.post("/watchlist", response_model=WatchlistEntry)
def add_to_watchlist(
    item: WatchlistItem,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> WatchlistEntry:
    """Add a show to the watchlist; adding it again refreshes the timestamp."""

    return store.add_to_watchlist(session_id, item)


@router.delete("/watchlist/{show_id}", response_model=StatusResponse)
def remove_from_watchlist(
    show_id: str,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> StatusResponse:
    store.remove_from_watchlist(session_id, show_id)
    return StatusResponse()


@router.get("/progress", response_model=list[ProgressEntry])
def get_progress(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> list[ProgressEntry]:
    return store.get_progress(session_id)


@router.post("/progress", response_model=ProgressEntry)
def update_progress(
    progress: ViewingProgress,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> ProgressEntry:
    """Record the latest playback position for a show."""

    return store.update_progress(session_id, progress)
