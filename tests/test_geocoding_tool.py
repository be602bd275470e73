from unittest.mock import MagicMock

import pytest

from tools.geocoding_tool import GeocodingError, geocode_place


def _response(payload):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = payload
    return response


HIT = {"status": "OK", "results": [{"geometry": {"location": {"lat": 34.9949, "lng": 135.785}}}]}
MISS = {"status": "ZERO_RESULTS", "results": []}


def test_geocode_hit():
    session = MagicMock()
    session.get.return_value = _response(HIT)

    coordinates = geocode_place("Kiyomizu-dera", api_key="test-key", session=session)

    assert coordinates.latitude == 34.9949
    assert coordinates.longitude == 135.785
    assert session.get.call_args.kwargs["params"]["address"] == "Kiyomizu-dera"


def test_geocode_retries_with_shorter_name():
    session = MagicMock()
    session.get.side_effect = [_response(MISS), _response(MISS), _response(HIT)]

    coordinates = geocode_place("Kiyomizu-dera main hall", api_key="test-key", session=session)

    queries = [call.kwargs["params"]["address"] for call in session.get.call_args_list]
    assert queries == ["Kiyomizu-dera main hall", "Kiyomizu-dera main", "Kiyomizu-dera"]
    assert coordinates.latitude == 34.9949


def test_geocode_gives_up():
    session = MagicMock()
    session.get.return_value = _response(MISS)

    with pytest.raises(GeocodingError):
        geocode_place("nowhere at all here now", api_key="test-key", session=session)
    # first attempt plus three retries
    assert session.get.call_count == 4


def test_geocode_requires_key():
    with pytest.raises(GeocodingError):
        geocode_place("Kyoto", api_key="")
