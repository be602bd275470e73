"""
Shared service instances for the routers.
Overridden in tests through app.dependency_overrides.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from config import settings
from engine.deduplicator import ProximityDeduplicator
from engine.route_cache import JsonFileRouteCache
from engine.route_resolver import RouteResolver
from tools.dataset_client import InMemoryFeatureStore, MapboxDatasetClient
from tools.directions_client import GoogleDirectionsClient

logger = logging.getLogger(__name__)


def get_dataset_id() -> str:
    return settings.MAPBOX_DATASET_ID


@lru_cache(maxsize=1)
def get_feature_store():
    if not settings.MAPBOX_DATASET_ID:
        logger.warning("⚠️ MAPBOX_DATASET_ID not set, markers are kept in memory only")
        return InMemoryFeatureStore()
    return MapboxDatasetClient()


@lru_cache(maxsize=1)
def get_directions_client() -> GoogleDirectionsClient:
    return GoogleDirectionsClient()


@lru_cache(maxsize=1)
def get_route_resolver() -> RouteResolver:
    return RouteResolver(
        cache=JsonFileRouteCache(settings.ROUTE_CACHE_PATH),
        directions_client=get_directions_client(),
        mode=settings.DIRECTIONS_MODE,
    )


def get_deduplicator(
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
) -> ProximityDeduplicator:
    return ProximityDeduplicator(
        store=store,
        dataset_id=dataset_id,
        radius_meters=settings.DEDUP_RADIUS_METERS,
    )
