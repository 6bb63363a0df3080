"""Per-session watchlist and viewing progress kept for the process lifetime."""
from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from uuid import uuid4

from ..schemas import ProgressEntry, ViewingProgress, WatchlistEntry, WatchlistItem


class SessionStore:
    """In-memory watchlists and progress keyed by an opaque session id.

    Both collections hold at most one entry per ``(session, show)`` pair.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._watchlists: dict[str, dict[str, WatchlistEntry]] = {}
        self._progress: dict[str, dict[str, ProgressEntry]] = {}

    def get_watchlist(self, session_id: str) -> list[WatchlistEntry]:
        with self._lock:
            return list(self._watchlists.get(session_id, {}).values())

    def add_to_watchlist(self, session_id: str, item: WatchlistItem) -> WatchlistEntry:
        """Add or refresh a show on the session's watchlist."""

        added_at = item.added_at or datetime.now(timezone.utc)
        with self._lock:
            entries = self._watchlists.setdefault(session_id, {})
            existing = entries.get(item.show_id)
            entry = WatchlistEntry(
                id=existing.id if existing else uuid4().hex,
                show_id=item.show_id,
                added_at=added_at,
            )
            entries[item.show_id] = entry
            return entry

    def remove_from_watchlist(self, session_id: str, show_id: str) -> bool:
        """Remove a show from the watchlist; returns whether an entry existed."""

        with self._lock:
            entries = self._watchlists.get(session_id)
            if not entries:
                return False
            return entries.pop(show_id, None) is not None

    def get_progress(self, session_id: str) -> list[ProgressEntry]:
        with self._lock:
            return list(self._progress.get(session_id, {}).values())

    def update_progress(self, session_id: str, progress: ViewingProgress) -> ProgressEntry:
        """Record the latest playback position, replacing any earlier one for the same show."""

        last_watched = progress.last_watched or datetime.now(timezone.utc)
        with self._lock:
            entries = self._progress.setdefault(session_id, {})
            existing = entries.get(progress.show_id)
            entry = ProgressEntry(
                id=existing.id if existing else uuid4().hex,
                show_id=progress.show_id,
                episode_id=progress.episode_id,
                season=progress.season,
                episode_number=progress.episode_number,
                progress=progress.progress,
                last_watched=last_watched,
            )
            entries[progress.show_id] = entry
            return entry
