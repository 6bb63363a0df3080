"""Public catalog browsing endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query

from ..dependencies import get_catalog_store
from ..schemas import Category, EpisodeModel, ShowModel
from ..stores.catalog_store import CatalogStore

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/shows", response_model=list[ShowModel])
def list_shows(
    category: str | None = Query(default=None, description="Only shows in this category."),
    featured: bool | None = Query(default=None, description="Filter on the featured flag."),
    trending: bool | None = Query(default=None, description="Filter on the trending flag."),
    store: CatalogStore = Depends(get_catalog_store),
) -> list[ShowModel]:
    """Return every show in insertion order, optionally filtered."""

    return store.list_shows(category=category, featured=featured, trending=trending)


@router.get("/shows/search", response_model=list[ShowModel])
def search_shows(
    q: str | None = Query(default=None, description="Case-insensitive search term."),
    store: CatalogStore = Depends(get_catalog_store),
) -> list[ShowModel]:
    """Match the query against title, description, genres and cast."""

    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query required")
    return store.search_shows(q)


@router.get("/shows/{slug}", response_model=ShowModel)
def get_show(slug: str, store: CatalogStore = Depends(get_catalog_store)) -> ShowModel:
    show = store.get_show_by_slug(slug)
    if show is None:
        raise HTTPException(status_code=404, detail="Show not found")
    return show


@router.get("/episodes/{show_id}", response_model=list[EpisodeModel])
def list_episodes(show_id: str, store: CatalogStore = Depends(get_catalog_store)) -> list[EpisodeModel]:
    """Return the episodes of a show; an unknown show yields an empty list."""

    return store.list_episodes(show_id)


@router.get("/categories", response_model=list[Category])
def list_categories(store: CatalogStore = Depends(get_catalog_store)) -> list[Category]:
    return store.categories()
