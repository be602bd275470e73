"""
Models package
- Marker / feature models (map_models)
- API request & response schemas (schemas)
"""

from .map_models import (
    Coordinates,
    LatLng,
    Marker,
    MarkerContent,
    MarkerIconType,
    Edge,
    DatasetFeature,
    FeatureCollection,
    DirectionsResult,
)
from .schemas import (
    MarkerCreateRequest,
    PlaceMarkerCreateRequest,
    MarkerUpdateRequest,
    ChainCreateRequest,
    ChainResponse,
    HighlightRequest,
    HighlightResponse,
    DirectionsRequest,
    PathsResponse,
    RouteStatusResponse,
)


__all__ = [
    "Coordinates",
    "LatLng",
    "Marker",
    "MarkerContent",
    "MarkerIconType",
    "Edge",
    "DatasetFeature",
    "FeatureCollection",
    "DirectionsResult",
    "MarkerCreateRequest",
    "PlaceMarkerCreateRequest",
    "MarkerUpdateRequest",
    "ChainCreateRequest",
    "ChainResponse",
    "HighlightRequest",
    "HighlightResponse",
    "DirectionsRequest",
    "PathsResponse",
    "RouteStatusResponse",
]
