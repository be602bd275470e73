from unittest.mock import MagicMock

import pytest
import requests

from models.map_models import LatLng
from tools.directions_client import DirectionsClientError, GoogleDirectionsClient

# polyline from the Google encoding docs: (38.5, -120.2), (40.7, -120.95), (43.252, -126.453)
ENCODED = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
ORIGIN = LatLng(lat=38.5, lng=-120.2)
DESTINATION = LatLng(lat=43.252, lng=-126.453)


def _session(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    session = MagicMock()
    session.get.return_value = response
    return session


def _ok_payload(route):
    return {
        "status": "OK",
        "routes": [dict({"legs": [{"distance": {"value": 1200}, "duration": {"value": 900}}]}, **route)],
    }


def test_decodes_overview_polyline():
    session = _session(_ok_payload({"overview_polyline": {"points": ENCODED}}))
    client = GoogleDirectionsClient(api_key="test-key", session=session)

    result = client.get_route(ORIGIN, DESTINATION, "walking")

    assert len(result.path) == 3
    assert result.path[0].lat == pytest.approx(38.5)
    assert result.path[2].lng == pytest.approx(-126.453)
    assert result.distance == 1200
    assert result.duration == 900

    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url.endswith("/maps/api/directions/json")
    assert params["origin"] == "38.5,-120.2"
    assert params["mode"] == "walking"
    assert params["key"] == "test-key"


def test_falls_back_to_step_polylines():
    payload = {
        "status": "OK",
        "routes": [{
            "legs": [{
                "steps": [{"polyline": {"points": ENCODED}}, {"polyline": {}}],
            }],
        }],
    }
    client = GoogleDirectionsClient(api_key="test-key", session=_session(payload))

    result = client.get_route(ORIGIN, DESTINATION)

    assert len(result.path) == 3
    assert result.distance == 0


def test_falls_back_to_leg_endpoints():
    payload = {
        "status": "OK",
        "routes": [{
            "legs": [{
                "start_location": {"lat": 1.0, "lng": 2.0},
                "end_location": {"lat": 3.0, "lng": 4.0},
            }],
        }],
    }
    client = GoogleDirectionsClient(api_key="test-key", session=_session(payload))

    result = client.get_route(ORIGIN, DESTINATION)

    assert result.path == [LatLng(lat=1.0, lng=2.0), LatLng(lat=3.0, lng=4.0)]


@pytest.mark.parametrize(
    "payload, status_code",
    [
        ({"status": "ZERO_RESULTS", "routes": []}, 200),
        ({"status": "OK", "routes": []}, 200),
        ({"status": "OK", "routes": [{"legs": []}]}, 200),
        ({"status": "OK", "routes": [{"legs": [{}]}]}, 200),
        ({}, 500),
    ],
)
def test_unusable_responses_raise(payload, status_code):
    client = GoogleDirectionsClient(api_key="test-key", session=_session(payload, status_code))
    with pytest.raises(DirectionsClientError):
        client.get_route(ORIGIN, DESTINATION)


def test_network_error_raises():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("offline")
    client = GoogleDirectionsClient(api_key="test-key", session=session)
    with pytest.raises(DirectionsClientError):
        client.get_route(ORIGIN, DESTINATION)


def test_missing_api_key():
    session = MagicMock()
    client = GoogleDirectionsClient(api_key="", session=session)
    with pytest.raises(DirectionsClientError):
        client.get_route(ORIGIN, DESTINATION)
    session.get.assert_not_called()
