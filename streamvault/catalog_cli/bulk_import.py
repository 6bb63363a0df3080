"""Reshape per-show scraper exports into single-show import files."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..catalog_api.stores.catalog_store import CatalogValidationError, parse_season_key

logger = logging.getLogger(__name__)

SLUG_SUFFIX = re.compile(r"(-tv-series-online-hindi-dubbed|-online-hindi-dubbed)$")
SKIPPED_NAME_MARKERS = ("all_shows", "database")
DEFAULT_DURATION = 45


@dataclass(slots=True)
class PreparedShow:
    title: str
    show_slug: str
    episodes: list[dict[str, Any]]

    def to_import_payload(self) -> dict[str, Any]:
        return {"showSlug": self.show_slug, "episodes": self.episodes}


@dataclass(slots=True)
class PrepareReport:
    prepared: list[PreparedShow] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def clean_slug(slug: str) -> str:
    """Drop the scraper's ``-online-hindi-dubbed`` style suffix from ``slug``."""

    return SLUG_SUFFIX.sub("", slug)


def prepare_show(data: dict[str, Any]) -> PreparedShow | None:
    """Convert one scraper export into import rows, or None when it has no episodes."""

    seasons = data.get("seasons")
    if not seasons or not data.get("slug"):
        return None

    episodes: list[dict[str, Any]] = []
    for key, entries in seasons.items():
        season = parse_season_key(key)
        for entry in entries:
            number = entry["episode"]
            episodes.append(
                {
                    "title": f"Episode {number}",
                    "episodeNumber": number,
                    "seasonNumber": season,
                    "description": f"Episode {number}",
                    "duration": DEFAULT_DURATION,
                    "videoUrl": entry.get("embed_url", ""),
                }
            )
    if not episodes:
        return None
    return PreparedShow(title=data.get("title", ""), show_slug=clean_slug(data["slug"]), episodes=episodes)


def prepare_directory(source_dir: Path, output_dir: Path) -> PrepareReport:
    """Write ``<showSlug>.json`` import files for every show export in ``source_dir``."""

    output_dir.mkdir(parents=True, exist_ok=True)
    report = PrepareReport()
    for path in sorted(source_dir.glob("*.json")):
        if any(marker in path.name for marker in SKIPPED_NAME_MARKERS):
            continue
        try:
            prepared = prepare_show(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError, CatalogValidationError) as exc:
            logger.error("Error processing %s: %s", path, exc)
            prepared = None
        if prepared is None:
            report.failed.append(path.name)
            continue
        target = output_dir / f"{prepared.show_slug}.json"
        target.write_text(json.dumps(prepared.to_import_payload(), indent=2), encoding="utf-8")
        report.prepared.append(prepared)
    return report
