"""File-backed catalog store owning shows and episodes.

The whole catalog lives in memory and is written to a single JSON file after
every mutation.  Mutations are serialized through one lock per store, staged
on copies of the in-memory maps, written to disk and only then swapped in, so
a failed write never leaves memory and disk out of step.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Iterable, Mapping, Sequence
from uuid import uuid4

from pydantic import ValidationError

from ..schemas import (
    Category,
    EpisodeCreate,
    EpisodeImportRow,
    EpisodeModel,
    EpisodeUpdate,
    ImportResult,
    ImportSummary,
    MultiShowExport,
    ShowCreate,
    ShowModel,
    ShowUpdate,
    SingleShowExport,
)
from ..utils.paths import ensure_parent_directory
from ..utils.thumbnails import resolve_thumbnail

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="action", name="Action & Thriller", slug="action"),
    Category(id="drama", name="Drama & Romance", slug="drama"),
    Category(id="comedy", name="Comedy", slug="comedy"),
    Category(id="horror", name="Horror & Mystery", slug="horror"),
)

NULLABLE_SHOW_FIELDS = frozenset({"imdb_rating", "cast", "creators", "category"})
NULLABLE_EPISODE_FIELDS = frozenset({"air_date"})

DEFAULT_EPISODE_DURATION = 45


class CatalogError(RuntimeError):
    """Base error raised by the catalog store."""

    status_code = 500


class CatalogValidationError(CatalogError):
    """Raised when input is well-formed but violates a catalog rule."""

    status_code = 400


class SlugConflictError(CatalogValidationError):
    """Raised when a show slug is already taken."""

    status_code = 409


class EpisodeConflictError(CatalogValidationError):
    """Raised when an episode's season and number already exist for its show."""

    status_code = 409


class CatalogNotFoundError(CatalogError):
    """Raised when a referenced record does not exist."""

    status_code = 404


class ShowNotFoundError(CatalogNotFoundError):
    """Raised for an unknown show id or slug."""


class EpisodeNotFoundError(CatalogNotFoundError):
    """Raised for an unknown episode id."""


class CatalogPersistenceError(CatalogError):
    """Raised when the catalog file cannot be read or written."""


class CatalogStore:
    """Thread-safe owner of the show and episode catalog."""

    def __init__(
        self,
        data_file: str | Path,
        *,
        placeholder_thumbnail_url: str,
        seed: Iterable[tuple[ShowCreate, Sequence[EpisodeImportRow]]] | None = None,
    ) -> None:
        self._path = Path(data_file).expanduser()
        self._placeholder_thumbnail_url = placeholder_thumbnail_url
        self._lock = Lock()
        self._shows: dict[str, ShowModel] = {}
        self._episodes: dict[str, EpisodeModel] = {}
        self._last_updated: datetime | None = None

        if seed is not None and _is_blank(self._path):
            self._seed(seed)
        elif self._path.exists():
            self.reload()

    @property
    def path(self) -> Path:
        """Location of the backing catalog file."""

        return self._path

    @property
    def last_updated(self) -> datetime | None:
        """Timestamp of the last successful write or load."""

        return self._last_updated

    def reload(self) -> None:
        """Replace the in-memory catalog with the contents of the backing file."""

        shows, episodes, last_updated = read_catalog_file(self._path)
        with self._lock:
            self._shows = {show.id: show for show in shows}
            self._episodes = {episode.id: episode for episode in episodes}
            self._last_updated = last_updated
        logger.info("Loaded %d shows and %d episodes from %s", len(shows), len(episodes), self._path)

    def save(self) -> None:
        """Rewrite the backing file from the current in-memory state."""

        with self._lock:
            self._commit(shows=dict(self._shows), episodes=dict(self._episodes))

    def snapshot(self) -> tuple[list[ShowModel], list[EpisodeModel]]:
        """Return a consistent copy of every show and episode."""

        with self._lock:
            return list(self._shows.values()), list(self._episodes.values())

    def counts(self) -> tuple[int, int]:
        """Return the number of shows and episodes."""

        return len(self._shows), len(self._episodes)

    def categories(self) -> list[Category]:
        """Return the fixed navigation categories."""

        return list(DEFAULT_CATEGORIES)

    # Shows

    def list_shows(
        self,
        *,
        category: str | None = None,
        featured: bool | None = None,
        trending: bool | None = None,
    ) -> list[ShowModel]:
        """Return shows in insertion order, optionally filtered."""

        shows = list(self._shows.values())
        if category:
            wanted = category.lower()
            shows = [show for show in shows if (show.category or "").lower() == wanted]
        if featured is not None:
            shows = [show for show in shows if show.featured is featured]
        if trending is not None:
            shows = [show for show in shows if show.trending is trending]
        return shows

    def get_show(self, show_id: str) -> ShowModel | None:
        return self._shows.get(show_id)

    def get_show_by_slug(self, slug: str) -> ShowModel | None:
        return _find_by_slug(self._shows.values(), slug)

    def search_shows(self, query: str) -> list[ShowModel]:
        """Case-insensitive substring match over title, description, genres and cast."""

        needle = query.strip().lower()
        if not needle:
            return []
        return [
            show
            for show in self._shows.values()
            if needle in show.title.lower()
            or needle in show.description.lower()
            or needle in show.genres.lower()
            or needle in (show.cast or "").lower()
        ]

    def create_show(self, data: ShowCreate) -> ShowModel:
        """Insert a new show and return the stored record."""

        with self._lock:
            if _find_by_slug(self._shows.values(), data.slug) is not None:
                raise SlugConflictError(f'A show with slug "{data.slug}" already exists')
            show = ShowModel(id=uuid4().hex, **data.model_dump())
            shows = dict(self._shows)
            shows[show.id] = show
            self._commit(shows=shows)
        logger.info("Created show %s (%s)", show.slug, show.id)
        return show

    def update_show(self, show_id: str, patch: ShowUpdate) -> ShowModel:
        """Merge the supplied fields of ``patch`` into an existing show."""

        changes = _patch_values(patch, NULLABLE_SHOW_FIELDS)
        with self._lock:
            existing = self._require_show(show_id)
            new_slug = changes.get("slug")
            if new_slug and new_slug != existing.slug:
                clash = _find_by_slug(self._shows.values(), new_slug)
                if clash is not None and clash.id != show_id:
                    raise SlugConflictError(f'A show with slug "{new_slug}" already exists')
            updated = existing.model_copy(update=changes)
            shows = dict(self._shows)
            shows[show_id] = updated
            self._commit(shows=shows)
        logger.info("Updated show %s fields=%s", show_id, sorted(changes))
        return updated

    def delete_show(self, show_id: str) -> int:
        """Delete a show and all of its episodes; returns the episode count removed."""

        with self._lock:
            self._require_show(show_id)
            shows = dict(self._shows)
            del shows[show_id]
            episodes = {
                episode_id: episode
                for episode_id, episode in self._episodes.items()
                if episode.show_id != show_id
            }
            removed = len(self._episodes) - len(episodes)
            self._commit(shows=shows, episodes=episodes)
        logger.info("Deleted show %s with %d episodes", show_id, removed)
        return removed

    def delete_all_shows(self) -> int:
        """Delete every show and episode; returns the number of shows removed."""

        with self._lock:
            deleted = len(self._shows)
            self._commit(shows={}, episodes={})
        logger.info("Deleted all %d shows and their episodes", deleted)
        return deleted

    # Episodes

    def list_episodes(self, show_id: str) -> list[EpisodeModel]:
        """Return the episodes of a show in insertion order."""

        return [episode for episode in self._episodes.values() if episode.show_id == show_id]

    def get_episode(self, episode_id: str) -> EpisodeModel | None:
        return self._episodes.get(episode_id)

    def create_episode(self, data: EpisodeCreate) -> EpisodeModel:
        """Insert a single episode for an existing show."""

        with self._lock:
            self._require_show(data.show_id)
            if self._natural_key_taken(data.show_id, data.season, data.episode_number):
                raise EpisodeConflictError(
                    f"S{data.season}E{data.episode_number} already exists for show {data.show_id}"
                )
            values = data.model_dump()
            values["thumbnail_url"] = resolve_thumbnail(
                data.thumbnail_url, data.video_url, self._placeholder_thumbnail_url
            )
            episode = EpisodeModel(id=uuid4().hex, **values)
            episodes = dict(self._episodes)
            episodes[episode.id] = episode
            self._commit(episodes=episodes)
        return episode

    def update_episode(self, episode_id: str, patch: EpisodeUpdate) -> EpisodeModel:
        """Merge ``patch`` into an episode, keeping its id and owning show."""

        changes = _patch_values(patch, NULLABLE_EPISODE_FIELDS)
        with self._lock:
            existing = self._episodes.get(episode_id)
            if existing is None:
                raise EpisodeNotFoundError(f"Episode {episode_id} not found")
            season = changes.get("season", existing.season)
            number = changes.get("episode_number", existing.episode_number)
            if (season, number) != (existing.season, existing.episode_number) and self._natural_key_taken(
                existing.show_id, season, number
            ):
                raise EpisodeConflictError(
                    f"S{season}E{number} already exists for show {existing.show_id}"
                )
            updated = existing.model_copy(update=changes)
            episodes = dict(self._episodes)
            episodes[episode_id] = updated
            self._commit(episodes=episodes)
        return updated

    def delete_episode(self, episode_id: str) -> None:
        with self._lock:
            if episode_id not in self._episodes:
                raise EpisodeNotFoundError(f"Episode {episode_id} not found")
            episodes = dict(self._episodes)
            del episodes[episode_id]
            self._commit(episodes=episodes)

    def delete_season(self, show_id: str, season: int) -> int:
        """Delete every episode of one season; returns the number removed."""

        with self._lock:
            self._require_show(show_id)
            episodes = {
                episode_id: episode
                for episode_id, episode in self._episodes.items()
                if not (episode.show_id == show_id and episode.season == season)
            }
            deleted = len(self._episodes) - len(episodes)
            if deleted:
                self._commit(episodes=episodes)
        logger.info("Deleted %d episodes from season %d of show %s", deleted, season, show_id)
        return deleted

    # Bulk import

    def import_episodes(
        self,
        slug: str,
        rows: Sequence[EpisodeImportRow],
        *,
        default_air_date: str | None = None,
    ) -> ImportResult:
        """Add episode rows to the show with ``slug``, skipping existing season/episode pairs."""

        with self._lock:
            show = _find_by_slug(self._shows.values(), slug)
            if show is None:
                raise ShowNotFoundError(f'Show with slug "{slug}" not found')
            shows = dict(self._shows)
            episodes = dict(self._episodes)
            added, skipped = self._stage_rows(show, rows, episodes, default_air_date)
            show = _reconcile_total_seasons(show, episodes)
            shows[show.id] = show
            if added or shows[show.id] is not self._shows[show.id]:
                self._commit(shows=shows, episodes=episodes)
        logger.info("Imported episodes into %s: added=%d skipped=%d", slug, added, skipped)
        return ImportResult(
            show=show.title,
            show_id=show.id,
            added=added,
            skipped=skipped,
            total=added + skipped,
            total_seasons=show.total_seasons,
        )

    def import_catalog_export(
        self, payload: Mapping[str, Any], *, create_missing_shows: bool = False
    ) -> ImportSummary:
        """Import a single-show or multi-show catalog export in one write."""

        export = parse_catalog_export(payload)
        today = date.today().isoformat()
        summary = ImportSummary()

        with self._lock:
            shows = dict(self._shows)
            episodes = dict(self._episodes)

            if isinstance(export, SingleShowExport):
                show = _find_by_slug(shows.values(), export.show_slug)
                if show is None:
                    raise ShowNotFoundError(
                        f'No show found with slug "{export.show_slug}". Create the show first.'
                    )
                added, skipped = self._stage_rows(show, export.episodes, episodes, None)
                shows[show.id] = _reconcile_total_seasons(show, episodes)
                summary.shows_matched = 1
                summary.episodes_imported = added
                summary.episodes_skipped = skipped
            else:
                for scraped in export.shows:
                    rows = _rows_from_seasons(scraped.seasons)
                    show = _find_by_slug(shows.values(), scraped.slug)
                    if show is None and not create_missing_shows:
                        summary.shows_not_found += 1
                        summary.not_found_shows.append(f"{scraped.title} ({scraped.slug})")
                        summary.episodes_skipped += len(rows)
                        continue
                    if show is None:
                        show = _placeholder_show(scraped.title, scraped.slug, rows)
                        shows[show.id] = show
                        summary.shows_created += 1
                    else:
                        summary.shows_matched += 1
                    added, skipped = self._stage_rows(show, rows, episodes, today)
                    shows[show.id] = _reconcile_total_seasons(show, episodes)
                    summary.episodes_imported += added
                    summary.episodes_skipped += skipped

            summary.total_episodes = summary.episodes_imported + summary.episodes_skipped
            if summary.episodes_imported or summary.shows_created or shows != self._shows:
                self._commit(shows=shows, episodes=episodes)

        logger.info(
            "Catalog import finished: created=%d matched=%d missing=%d imported=%d skipped=%d",
            summary.shows_created,
            summary.shows_matched,
            summary.shows_not_found,
            summary.episodes_imported,
            summary.episodes_skipped,
        )
        return summary

    # Internals

    def _require_show(self, show_id: str) -> ShowModel:
        show = self._shows.get(show_id)
        if show is None:
            raise ShowNotFoundError(f"Show {show_id} not found")
        return show

    def _natural_key_taken(self, show_id: str, season: int, episode_number: int) -> bool:
        return any(
            episode.show_id == show_id
            and episode.season == season
            and episode.episode_number == episode_number
            for episode in self._episodes.values()
        )

    def _stage_rows(
        self,
        show: ShowModel,
        rows: Sequence[EpisodeImportRow],
        episodes: dict[str, EpisodeModel],
        default_air_date: str | None,
    ) -> tuple[int, int]:
        """Add ``rows`` to ``episodes`` in place and return (added, skipped)."""

        existing_keys = {
            (episode.season, episode.episode_number)
            for episode in episodes.values()
            if episode.show_id == show.id
        }
        added = skipped = 0
        for row in rows:
            key = (row.season, row.episode_number)
            if key in existing_keys:
                logger.debug("Skipping S%dE%d of %s (already exists)", row.season, row.episode_number, show.slug)
                skipped += 1
                continue
            episode = EpisodeModel(
                id=uuid4().hex,
                show_id=show.id,
                season=row.season,
                episode_number=row.episode_number,
                title=row.title or f"Episode {row.episode_number}",
                description=row.description or f"Episode {row.episode_number} of {show.title}",
                thumbnail_url=resolve_thumbnail(
                    row.thumbnail_url, row.video_url, self._placeholder_thumbnail_url
                ),
                duration=row.duration or DEFAULT_EPISODE_DURATION,
                video_url=row.video_url,
                air_date=row.air_date or default_air_date,
            )
            episodes[episode.id] = episode
            existing_keys.add(key)
            added += 1
        return added, skipped

    def _seed(self, seed: Iterable[tuple[ShowCreate, Sequence[EpisodeImportRow]]]) -> None:
        shows: dict[str, ShowModel] = {}
        episodes: dict[str, EpisodeModel] = {}
        for show_data, rows in seed:
            show = ShowModel(id=uuid4().hex, **show_data.model_dump())
            shows[show.id] = show
            self._stage_rows(show, rows, episodes, None)
        with self._lock:
            self._commit(shows=shows, episodes=episodes)
        logger.info("Seeded catalog with %d shows and %d episodes", len(shows), len(episodes))

    def _commit(
        self,
        *,
        shows: dict[str, ShowModel] | None = None,
        episodes: dict[str, EpisodeModel] | None = None,
    ) -> None:
        """Write the staged state to disk, then make it current. Caller holds the lock."""

        next_shows = self._shows if shows is None else shows
        next_episodes = self._episodes if episodes is None else episodes
        self._last_updated = write_catalog_file(
            self._path, next_shows.values(), next_episodes.values()
        )
        self._shows = next_shows
        self._episodes = next_episodes


def read_catalog_file(path: Path) -> tuple[list[ShowModel], list[EpisodeModel], datetime | None]:
    """Load shows and episodes from a catalog file, normalizing legacy fields."""

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Unable to read catalog file %s: %s", path, exc)
        raise CatalogPersistenceError(f"Unable to read catalog file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise CatalogPersistenceError(f"Catalog file {path} does not contain a JSON object")

    try:
        shows = [ShowModel.model_validate(item) for item in data.get("shows") or []]
        episodes = [EpisodeModel.model_validate(item) for item in data.get("episodes") or []]
    except ValidationError as exc:
        raise CatalogPersistenceError(f"Catalog file {path} contains invalid records: {exc}") from exc

    last_updated: datetime | None = None
    raw_timestamp = data.get("lastUpdated")
    if isinstance(raw_timestamp, str):
        try:
            last_updated = datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Ignoring malformed lastUpdated value in %s", path)
    return shows, episodes, last_updated


def write_catalog_file(
    path: Path, shows: Iterable[ShowModel], episodes: Iterable[EpisodeModel]
) -> datetime:
    """Serialize the full catalog to ``path`` and return the write timestamp."""

    timestamp = datetime.now(timezone.utc)
    payload = {
        "shows": [show.model_dump(mode="json", by_alias=True) for show in shows],
        "episodes": [episode.model_dump(mode="json", by_alias=True) for episode in episodes],
        "lastUpdated": timestamp.isoformat().replace("+00:00", "Z"),
    }
    try:
        target = ensure_parent_directory(path)
        temp_path = target.with_name(target.name + ".tmp")
        temp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        temp_path.replace(target)
    except OSError as exc:
        logger.error("Unable to write catalog file %s: %s", path, exc)
        raise CatalogPersistenceError(f"Unable to write catalog file {path}: {exc}") from exc
    return timestamp


def parse_catalog_export(payload: Mapping[str, Any]) -> SingleShowExport | MultiShowExport:
    """Detect and validate the format of a catalog export."""

    if not isinstance(payload, Mapping):
        raise CatalogValidationError("Import payload must be a JSON object")
    try:
        if "showSlug" in payload:
            return SingleShowExport.model_validate(payload)
        if "shows" in payload:
            return MultiShowExport.model_validate(payload)
    except ValidationError as exc:
        raise CatalogValidationError(f"Invalid import payload: {exc}") from exc
    raise CatalogValidationError('Import payload needs either "showSlug" and "episodes" or "shows"')


def parse_season_key(key: str) -> int:
    """Return the season number of a ``season_N`` export key."""

    try:
        return int(key.removeprefix("season_"))
    except ValueError as exc:
        raise CatalogValidationError(f"Invalid season key {key!r}") from exc


def _rows_from_seasons(seasons: Mapping[str, Sequence[Any]]) -> list[EpisodeImportRow]:
    rows: list[EpisodeImportRow] = []
    for key, entries in seasons.items():
        season = parse_season_key(key)
        for entry in entries:
            rows.append(
                EpisodeImportRow(season=season, episode_number=entry.episode, video_url=entry.embed_url)
            )
    return rows


def _placeholder_show(title: str, slug: str, rows: Sequence[EpisodeImportRow]) -> ShowModel:
    """Build a show with default metadata for an export entry missing from the catalog."""

    return ShowModel(
        id=uuid4().hex,
        title=title,
        slug=slug,
        description=f"{title} - Hindi Dubbed Series",
        year=date.today().year,
        rating="TV-14",
        genres="Drama",
        language="Hindi",
        total_seasons=len({row.season for row in rows}),
        category="drama",
    )


def _reconcile_total_seasons(show: ShowModel, episodes: Mapping[str, EpisodeModel]) -> ShowModel:
    """Raise ``total_seasons`` to the highest season present among the show's episodes."""

    seasons = [episode.season for episode in episodes.values() if episode.show_id == show.id]
    if seasons and max(seasons) > show.total_seasons:
        logger.info("Raising totalSeasons of %s to %d", show.slug, max(seasons))
        return show.model_copy(update={"total_seasons": max(seasons)})
    return show


def _find_by_slug(shows: Iterable[ShowModel], slug: str) -> ShowModel | None:
    for show in shows:
        if show.slug == slug:
            return show
    return None


def _patch_values(patch: ShowUpdate | EpisodeUpdate, nullable: frozenset[str]) -> dict[str, Any]:
    """Return explicitly supplied patch fields, dropping nulls for required fields."""

    values = patch.model_dump(exclude_unset=True)
    return {key: value for key, value in values.items() if value is not None or key in nullable}


def _is_blank(path: Path) -> bool:
    """True when ``path`` is missing or holds only whitespace."""

    try:
        return not path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return True
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogPersistenceError(f"Unable to read catalog file {path}: {exc}") from exc
