import logging
from typing import Any, Dict, List, Optional

import requests
from googlemaps.convert import decode_polyline

from config import settings
from models.map_models import DirectionsResult, LatLng

logger = logging.getLogger(__name__)


class DirectionsClientError(Exception):
    """Directions provider call / response error."""


def _decode_points(encoded: str) -> List[LatLng]:
    return [LatLng(lat=point["lat"], lng=point["lng"]) for point in decode_polyline(encoded)]


def _extract_path(route: Dict[str, Any], leg: Dict[str, Any]) -> List[LatLng]:
    """
    overview_polyline first, then the step polylines, then the bare leg endpoints.
    """
    overview = (route.get("overview_polyline") or {}).get("points")
    if overview:
        try:
            return _decode_points(overview)
        except (ValueError, IndexError, TypeError) as exc:
            logger.warning(f"⚠️ overview_polyline decode failed: {exc}")

    path: List[LatLng] = []
    for step in leg.get("steps") or []:
        points = (step.get("polyline") or {}).get("points")
        if not points:
            continue
        try:
            path.extend(_decode_points(points))
        except (ValueError, IndexError, TypeError) as exc:
            logger.warning(f"⚠️ step polyline decode failed: {exc}")

    if not path:
        start = leg.get("start_location") or {}
        end = leg.get("end_location") or {}
        if "lat" in start and "lat" in end:
            path = [LatLng(**start), LatLng(**end)]

    return path


class GoogleDirectionsClient:
    """Google Directions REST API (walking by default)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.base_url = (base_url or settings.GOOGLE_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def get_route(
        self, origin: LatLng, destination: LatLng, mode: Optional[str] = None
    ) -> DirectionsResult:
        if not self.api_key:
            raise DirectionsClientError("GOOGLE_API_KEY is not set.")

        params = {
            "origin": f"{origin.lat},{origin.lng}",
            "destination": f"{destination.lat},{destination.lng}",
            "mode": mode or settings.DIRECTIONS_MODE,
            "key": self.api_key,
        }

        try:
            response = self.session.get(
                f"{self.base_url}/maps/api/directions/json", params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise DirectionsClientError(f"Directions request failed: {exc}") from exc

        if response.status_code != 200:
            raise DirectionsClientError(f"Directions API request failed: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise DirectionsClientError(f"Directions response is not JSON: {exc}") from exc

        status = data.get("status")
        if status != "OK":
            raise DirectionsClientError(
                f"Directions API error: {status} - {data.get('error_message', 'Unknown error')}"
            )

        routes = data.get("routes")
        if not isinstance(routes, list) or not routes:
            raise DirectionsClientError("Directions API returned no routes")

        legs = routes[0].get("legs")
        if not isinstance(legs, list) or not legs:
            raise DirectionsClientError("Directions API returned no legs")

        leg = legs[0]
        path = _extract_path(routes[0], leg)
        if not path:
            raise DirectionsClientError("Directions API returned an empty path")

        return DirectionsResult(
            path=path,
            distance=(leg.get("distance") or {}).get("value", 0),
            duration=(leg.get("duration") or {}).get("value", 0),
        )
