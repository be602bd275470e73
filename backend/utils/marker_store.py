"""Feature store <-> Marker helpers shared by the routers."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from models.map_models import Marker
from utils.geo import fingerprint

logger = logging.getLogger(__name__)


async def load_markers(store, dataset_id: str) -> List[Marker]:
    collection = await asyncio.to_thread(store.get_all_features, dataset_id)
    markers: List[Marker] = []
    for feature in collection.features:
        try:
            markers.append(Marker.from_feature(feature))
        except (ValueError, IndexError, TypeError) as e:
            logger.warning(f"⚠️ Skipping invalid feature {feature.id}: {e}")
    return markers


def find_marker(markers: List[Marker], marker_id: str) -> Optional[Marker]:
    return next((marker for marker in markers if marker.id == marker_id), None)


async def save_marker(store, dataset_id: str, marker: Marker) -> Marker:
    marker.content.updated_at = datetime.now(timezone.utc)
    properties = marker.to_feature_properties(
        coordinate_hash=fingerprint(marker.coordinates.latitude, marker.coordinates.longitude)
    )
    await asyncio.to_thread(store.upsert_feature, dataset_id, marker.id, marker.coordinates, properties)
    return marker
