import asyncio
import logging
from typing import Optional

from models.map_models import Coordinates, DatasetFeature, Marker, MarkerContent
from models.schemas import MarkerCreateRequest
from utils.geo import coordinate_feature_id, fingerprint, is_within_distance

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 10.0


class ProximityDeduplicator:
    """
    Reuses an existing feature for the same physical place instead of creating a new marker.

    Lookup order (first match wins):
      1. feature id == "coord_<fingerprint>"
      2. first feature within radius_meters (full scan)
      3. create and persist under "coord_<fingerprint>"

    The lookup is best effort: a failing store read is logged and creation goes ahead.
    The full scan is O(n) per creation.
    """

    def __init__(self, store, dataset_id: str, radius_meters: float = DEFAULT_RADIUS_METERS):
        self.store = store
        self.dataset_id = dataset_id
        self.radius_meters = radius_meters

    async def find_existing(self, coordinates: Coordinates) -> Optional[DatasetFeature]:
        """Steps 1-2. Returns None when nothing matches or the store is unreachable."""
        feature_id = coordinate_feature_id(coordinates.latitude, coordinates.longitude)
        try:
            collection = await asyncio.to_thread(self.store.get_all_features, self.dataset_id)
        except Exception as e:
            logger.warning(f"⚠️ Duplicate check skipped, store lookup failed: {e}")
            return None

        for feature in collection.features:
            if feature.id == feature_id:
                logger.info(f"Reusing marker {feature.id} (same fingerprint)")
                return feature

        for feature in collection.features:
            lng, lat = feature.geometry.coordinates[0], feature.geometry.coordinates[1]
            if is_within_distance(coordinates.latitude, coordinates.longitude, lat, lng, self.radius_meters):
                logger.info(f"Reusing marker {feature.id} (within {self.radius_meters} m)")
                return feature

        return None

    async def resolve_or_create(self, request: MarkerCreateRequest) -> Marker:
        existing = await self.find_existing(request.coordinates)
        if existing is not None:
            return Marker.from_feature(existing)

        coordinate_hash = fingerprint(request.coordinates.latitude, request.coordinates.longitude)
        feature_id = coordinate_feature_id(request.coordinates.latitude, request.coordinates.longitude)
        marker = Marker(
            id=feature_id,
            coordinates=request.coordinates,
            content=MarkerContent(
                id=feature_id,
                title=request.title,
                icon_type=request.icon_type,
                markdown_content=request.content or "",
                next=[],
            ),
        )

        await asyncio.to_thread(
            self.store.upsert_feature,
            self.dataset_id,
            feature_id,
            marker.coordinates,
            marker.to_feature_properties(coordinate_hash=coordinate_hash),
        )
        logger.info(f"✅ Marker created: {feature_id} ({request.title})")
        return marker
