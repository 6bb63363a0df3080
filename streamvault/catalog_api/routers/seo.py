"""Sitemap, robots.txt and crawler-facing pages with injected meta tags."""
from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from ..dependencies import get_catalog_store, get_settings
from ..schemas import EpisodeModel
from ..settings import CatalogSettings
from ..stores.catalog_store import CatalogStore
from ..views.meta_tags import episode_meta_tags, generate_meta_tags, inject_meta_tags, show_meta_tags
from ..views.sitemap import build_robots_txt, build_sitemap

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seo"])


@router.get("/sitemap.xml", response_class=Response)
def sitemap(
    settings: CatalogSettings = Depends(get_settings),
    store: CatalogStore = Depends(get_catalog_store),
) -> Response:
    """Render the sitemap from the current catalog."""

    shows, episodes = store.snapshot()
    episodes_by_show: dict[str, list[EpisodeModel]] = defaultdict(list)
    for episode in episodes:
        episodes_by_show[episode.show_id].append(episode)
    xml = build_sitemap(settings.base_url, store.categories(), shows, episodes_by_show)
    return Response(content=xml, media_type="application/xml")


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots(settings: CatalogSettings = Depends(get_settings)) -> str:
    return build_robots_txt(settings.base_url)


def _read_index_html(settings: CatalogSettings) -> str:
    if not settings.index_html_path:
        raise HTTPException(status_code=404, detail="Index page is not configured")
    path = Path(settings.index_html_path).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Unable to read index template %s: %s", path, exc)
        raise HTTPException(status_code=404, detail="Index page is not available") from exc


@router.get("/show/{slug}", response_class=HTMLResponse)
def show_page(
    slug: str,
    settings: CatalogSettings = Depends(get_settings),
    store: CatalogStore = Depends(get_catalog_store),
) -> HTMLResponse:
    """Serve the client index page with show-specific meta tags."""

    html = _read_index_html(settings)
    show = store.get_show_by_slug(slug)
    if show is not None:
        html = inject_meta_tags(html, generate_meta_tags(show_meta_tags(show, settings.base_url)))
    return HTMLResponse(html)


@router.get("/watch/{slug}", response_class=HTMLResponse)
def watch_page(
    slug: str,
    season: int | None = Query(default=None, ge=0),
    episode: int | None = Query(default=None, ge=0),
    settings: CatalogSettings = Depends(get_settings),
    store: CatalogStore = Depends(get_catalog_store),
) -> HTMLResponse:
    """Serve the client index page with episode-specific meta tags."""

    html = _read_index_html(settings)
    show = store.get_show_by_slug(slug)
    if show is None or season is None or episode is None:
        return HTMLResponse(html)
    match = next(
        (
            item
            for item in store.list_episodes(show.id)
            if item.season == season and item.episode_number == episode
        ),
        None,
    )
    if match is not None:
        html = inject_meta_tags(
            html, generate_meta_tags(episode_meta_tags(show, match, settings.base_url))
        )
    return HTMLResponse(html)
