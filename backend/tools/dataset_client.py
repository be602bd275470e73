import logging
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from config import settings
from models.map_models import Coordinates, DatasetFeature, FeatureCollection

logger = logging.getLogger(__name__)


class DatasetClientError(Exception):
    """Feature store configuration / call error."""


def _parse_features(raw_features: List[Any]) -> List[DatasetFeature]:
    """Drop features without an id or a usable point geometry."""
    features: List[DatasetFeature] = []
    for raw in raw_features:
        if not isinstance(raw, dict):
            continue
        feature_id = raw.get("id") or ((raw.get("properties") or {}).get("metadata") or {}).get("id")
        if not feature_id:
            logger.warning(f"⚠️ Skipping feature without id: {raw}")
            continue
        try:
            features.append(
                DatasetFeature(
                    id=str(feature_id),
                    geometry=raw.get("geometry") or {},
                    properties=raw.get("properties") or {},
                )
            )
        except ValidationError as exc:
            logger.warning(f"⚠️ Skipping invalid feature {feature_id}: {exc}")
    return features


class MapboxDatasetClient:
    """
    Mapbox Datasets API as a key-value feature store.
    Blocking (requests); the engine calls it through asyncio.to_thread.
    """

    def __init__(
        self,
        username: Optional[str] = None,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.username = username if username is not None else settings.MAPBOX_USERNAME
        self.access_token = access_token if access_token is not None else settings.MAPBOX_SECRET_ACCESS_TOKEN
        self.base_url = (base_url or settings.MAPBOX_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def _features_url(self, dataset_id: str, feature_id: str = "") -> str:
        url = f"{self.base_url}/datasets/v1/{self.username}/{dataset_id}/features"
        return f"{url}/{feature_id}" if feature_id else url

    def _check_credentials(self):
        if not self.username or not self.access_token:
            raise DatasetClientError("MAPBOX_USERNAME / MAPBOX_SECRET_ACCESS_TOKEN are not set.")

    def get_all_features(self, dataset_id: str) -> FeatureCollection:
        self._check_credentials()
        params = {"access_token": self.access_token, "_t": int(time.time() * 1000)}
        headers = {"Cache-Control": "no-cache", "Pragma": "no-cache"}

        try:
            response = self.session.get(
                self._features_url(dataset_id), params=params, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise DatasetClientError(f"Dataset request failed: {exc}") from exc

        if response.status_code != 200:
            if response.status_code == 401:
                logger.error("❌ Dataset auth failed: check MAPBOX_SECRET_ACCESS_TOKEN (datasets:read), MAPBOX_USERNAME and MAPBOX_DATASET_ID")
            raise DatasetClientError(f"Dataset API error: {response.status_code} - {response.text[:200]}")

        try:
            data = response.json()
        except ValueError as exc:
            raise DatasetClientError(f"Dataset response is not JSON: {exc}") from exc

        features = _parse_features(data.get("features") or [])
        logger.info(f"✅ Loaded {len(features)} features from dataset {dataset_id}")
        return FeatureCollection(features=features)

    def upsert_feature(
        self,
        dataset_id: str,
        feature_id: str,
        coordinates: Coordinates,
        properties: Dict[str, Any],
    ) -> DatasetFeature:
        self._check_credentials()
        payload = {
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [coordinates.longitude, coordinates.latitude],
            },
            "properties": properties,
        }

        try:
            response = self.session.put(
                self._features_url(dataset_id, feature_id),
                params={"access_token": self.access_token},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DatasetClientError(f"Dataset upsert failed: {exc}") from exc

        if response.status_code not in (200, 201):
            raise DatasetClientError(f"Dataset API error: {response.status_code}")

        data = response.json()
        return DatasetFeature(
            id=data.get("id") or feature_id,
            geometry=data.get("geometry") or payload["geometry"],
            properties=data.get("properties") or properties,
        )

    def delete_feature(self, dataset_id: str, feature_id: str) -> None:
        self._check_credentials()
        try:
            response = self.session.delete(
                self._features_url(dataset_id, feature_id),
                params={"access_token": self.access_token},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DatasetClientError(f"Dataset delete failed: {exc}") from exc

        if response.status_code not in (200, 204):
            raise DatasetClientError(f"Dataset API error: {response.status_code}")


class InMemoryFeatureStore:
    """Same interface as MapboxDatasetClient, kept in process memory."""

    def __init__(self, dataset_id: str = "", features: Optional[List[DatasetFeature]] = None):
        self._datasets: Dict[str, Dict[str, DatasetFeature]] = {}
        for feature in features or []:
            self._dataset(dataset_id)[feature.id] = feature

    def _dataset(self, dataset_id: str) -> Dict[str, DatasetFeature]:
        return self._datasets.setdefault(dataset_id, {})

    def get_all_features(self, dataset_id: str) -> FeatureCollection:
        return FeatureCollection(features=list(self._dataset(dataset_id).values()))

    def upsert_feature(
        self,
        dataset_id: str,
        feature_id: str,
        coordinates: Coordinates,
        properties: Dict[str, Any],
    ) -> DatasetFeature:
        feature = DatasetFeature(
            id=feature_id,
            geometry={"type": "Point", "coordinates": [coordinates.longitude, coordinates.latitude]},
            properties=properties,
        )
        self._dataset(dataset_id)[feature_id] = feature
        return feature

    def delete_feature(self, dataset_id: str, feature_id: str) -> None:
        self._dataset(dataset_id).pop(feature_id, None)
