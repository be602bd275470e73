from unittest.mock import MagicMock

import pytest

from models.map_models import Coordinates
from tools.dataset_client import DatasetClientError, InMemoryFeatureStore, MapboxDatasetClient


def _response(payload=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = "error body"
    return response


def _client(session):
    return MapboxDatasetClient(
        username="mapper",
        access_token="sk.test",
        base_url="https://api.mapbox.com/",
        session=session,
    )


def test_get_all_features_skips_invalid():
    session = MagicMock()
    session.get.return_value = _response({
        "type": "FeatureCollection",
        "features": [
            {"id": "a", "geometry": {"type": "Point", "coordinates": [135.7681, 35.0116]}, "properties": {"next": ["b"]}},
            {"geometry": {"type": "Point", "coordinates": [1, 2]}, "properties": {}},
            {"id": "broken", "geometry": {"type": "Point", "coordinates": []}},
            {"id": "no-geometry"},
        ],
    })

    collection = _client(session).get_all_features("ds1")

    assert [feature.id for feature in collection.features] == ["a"]
    assert collection.features[0].properties["next"] == ["b"]
    url = session.get.call_args.args[0]
    assert url == "https://api.mapbox.com/datasets/v1/mapper/ds1/features"
    assert session.get.call_args.kwargs["params"]["access_token"] == "sk.test"
    assert session.get.call_args.kwargs["headers"]["Cache-Control"] == "no-cache"


def test_feature_id_from_metadata():
    session = MagicMock()
    session.get.return_value = _response({
        "features": [
            {"geometry": {"type": "Point", "coordinates": [1, 2]}, "properties": {"metadata": {"id": "meta-id"}}},
        ],
    })

    collection = _client(session).get_all_features("ds1")

    assert [feature.id for feature in collection.features] == ["meta-id"]


def test_get_all_features_http_error():
    session = MagicMock()
    session.get.return_value = _response(status_code=401)
    with pytest.raises(DatasetClientError):
        _client(session).get_all_features("ds1")


def test_missing_credentials():
    session = MagicMock()
    client = MapboxDatasetClient(username="", access_token="", session=session)
    with pytest.raises(DatasetClientError):
        client.get_all_features("ds1")
    session.get.assert_not_called()


def test_upsert_sends_lng_lat_order():
    session = MagicMock()
    session.put.return_value = _response({}, status_code=200)

    feature = _client(session).upsert_feature(
        "ds1", "coord_x", Coordinates(latitude=35.0116, longitude=135.7681), {"next": []}
    )

    url = session.put.call_args.args[0]
    payload = session.put.call_args.kwargs["json"]
    assert url.endswith("/datasets/v1/mapper/ds1/features/coord_x")
    assert payload["geometry"]["coordinates"] == [135.7681, 35.0116]
    assert feature.id == "coord_x"
    assert feature.geometry.coordinates == [135.7681, 35.0116]


def test_upsert_rejected():
    session = MagicMock()
    session.put.return_value = _response(status_code=422)
    with pytest.raises(DatasetClientError):
        _client(session).upsert_feature("ds1", "x", Coordinates(latitude=0, longitude=0), {})


def test_delete_accepts_no_content():
    session = MagicMock()
    session.delete.return_value = _response(status_code=204)
    _client(session).delete_feature("ds1", "x")
    session.delete.assert_called_once()


def test_in_memory_store_round_trip():
    store = InMemoryFeatureStore()
    store.upsert_feature("ds", "a", Coordinates(latitude=1.5, longitude=2.5), {"next": []})

    assert [feature.id for feature in store.get_all_features("ds").features] == ["a"]
    assert store.get_all_features("other").features == []

    store.delete_feature("ds", "a")
    assert store.get_all_features("ds").features == []


def test_null_metadata_is_skipped_not_fatal():
    session = MagicMock()
    session.get.return_value = _response({
        "features": [
            {"geometry": {"type": "Point", "coordinates": [1, 2]}, "properties": {"metadata": None}},
            {"id": "kept", "geometry": {"type": "Point", "coordinates": [1, 2]}, "properties": {"metadata": None}},
        ],
    })

    collection = _client(session).get_all_features("ds1")

    assert [feature.id for feature in collection.features] == ["kept"]
