"""Coordinate fingerprints and great-circle distance."""

import hashlib
import math

EARTH_RADIUS_M = 6371000
FINGERPRINT_PRECISION = 6
COORD_ID_PREFIX = "coord_"


def _round_half_up(value: float, digits: int = FINGERPRINT_PRECISION) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _format_coordinate(value: float) -> str:
    # "35.0116" / "135" / "0" - no exponent, no trailing zeros, no "-0"
    text = f"{value + 0.0:.{FINGERPRINT_PRECISION}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def fingerprint(lat: float, lng: float) -> str:
    """
    Stable key for a coordinate: md5 of "lat,lng" rounded to 6 decimals (~0.11 m).
    """
    key = f"{_format_coordinate(_round_half_up(lat))},{_format_coordinate(_round_half_up(lng))}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def coordinate_feature_id(lat: float, lng: float) -> str:
    return f"{COORD_ID_PREFIX}{fingerprint(lat, lng)}"


def distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def is_within_distance(
    lat1: float, lng1: float, lat2: float, lng2: float, max_meters: float = 10
) -> bool:
    return distance_meters(lat1, lng1, lat2, lng2) <= max_meters
