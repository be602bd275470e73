import logging
from typing import Optional

import requests

from config import settings
from models.map_models import Coordinates

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Place could not be resolved to coordinates."""


def geocode_place(name: str, api_key: Optional[str] = None, session: Optional[requests.Session] = None) -> Coordinates:
    """
    Resolve a place name to coordinates with the Google Geocoding API.
    If nothing matches, drop words from the end and retry (e.g. 'Kiyomizu-dera main hall' -> 'Kiyomizu-dera').
    """
    api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
    if not api_key:
        raise GeocodingError("GOOGLE_API_KEY is not set.")

    query = name.strip()
    if not query:
        raise GeocodingError("Place name is empty.")

    http = session or requests
    url = f"{settings.GOOGLE_API_BASE_URL.rstrip('/')}/maps/api/geocode/json"

    # at most 3 shortened retries
    max_retries = 3
    retry_count = 0

    while query and retry_count <= max_retries:
        try:
            response = http.get(url, params={"address": query, "key": api_key}, timeout=settings.REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise GeocodingError(f"Geocoding request failed: {exc}") from exc

        if response.status_code == 200:
            data = response.json()
            results = data.get("results") or []
            if data.get("status") == "OK" and results:
                location = results[0]["geometry"]["location"]
                logger.info(f"✅ Geocoded '{query}' (original: {name})")
                return Coordinates(latitude=float(location["lat"]), longitude=float(location["lng"]))

        words = query.split()
        if len(words) <= 1:
            break
        query = " ".join(words[:-1])
        retry_count += 1
        logger.info(f"Geocoding miss, retrying with '{query}'")

    raise GeocodingError(f"No place found for '{name}'")
