"""
Tools package
- External API clients (Mapbox Datasets, Google Directions / Geocoding)
"""

from .dataset_client import MapboxDatasetClient, InMemoryFeatureStore, DatasetClientError
from .directions_client import GoogleDirectionsClient, DirectionsClientError
from .geocoding_tool import geocode_place, GeocodingError

__all__ = [
    "MapboxDatasetClient",
    "InMemoryFeatureStore",
    "DatasetClientError",
    "GoogleDirectionsClient",
    "DirectionsClientError",
    "geocode_place",
    "GeocodingError",
]
