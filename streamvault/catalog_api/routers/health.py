"""Health endpoints."""
from fastapi import APIRouter, Depends

from ..dependencies import get_catalog_store
from ..schemas import HealthStatus
from ..stores.catalog_store import CatalogStore

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
def get_health(store: CatalogStore = Depends(get_catalog_store)) -> HealthStatus:
    """Return service heartbeat information."""

    shows, episodes = store.counts()
    return HealthStatus(shows=shows, episodes=episodes)
