import math

import pytest

from utils.geo import (
    EARTH_RADIUS_M,
    _format_coordinate,
    coordinate_feature_id,
    distance_meters,
    fingerprint,
    is_within_distance,
)

KYOTO = (35.0116, 135.7681)


def test_distance_is_symmetric():
    a = (35.0116, 135.7681)
    b = (34.9949, 135.7850)
    assert distance_meters(*a, *b) == pytest.approx(distance_meters(*b, *a))


def test_distance_to_self_is_zero():
    assert distance_meters(*KYOTO, *KYOTO) == 0


def test_distance_known_offset():
    # 0.001 deg of latitude ~ 111.19 m
    meters = distance_meters(35.0, 135.0, 35.001, 135.0)
    expected = EARTH_RADIUS_M * math.radians(0.001)
    assert meters == pytest.approx(expected, rel=0.005)


def test_is_within_distance_boundary():
    assert is_within_distance(35.0116, 135.7681, 35.01161, 135.76811, 10)
    assert not is_within_distance(35.0116, 135.7681, 35.0118, 135.7681, 10)


def test_format_coordinate():
    assert _format_coordinate(35.0116) == "35.0116"
    assert _format_coordinate(135.0) == "135"
    assert _format_coordinate(-0.0) == "0"
    assert _format_coordinate(-33.8688) == "-33.8688"


def test_fingerprint_known_value():
    # md5("35.0116,135.7681")
    assert fingerprint(*KYOTO) == "dc855a1e2e18e8806528a9f025ae5dd5"
    assert coordinate_feature_id(*KYOTO) == "coord_dc855a1e2e18e8806528a9f025ae5dd5"


def test_fingerprint_ignores_sub_rounding_jitter():
    lat, lng = KYOTO
    assert fingerprint(lat + 4e-7, lng) == fingerprint(lat, lng)
    assert fingerprint(lat - 4e-7, lng) == fingerprint(lat, lng)


def test_fingerprint_changes_above_rounding_threshold():
    lat, lng = KYOTO
    assert fingerprint(lat + 2e-6, lng) != fingerprint(lat, lng)
    assert fingerprint(lat, lng - 2e-6) != fingerprint(lat, lng)


def test_fingerprint_negative_zero_collapses():
    # md5("0,0")
    assert fingerprint(-1e-7, 0.0) == "fc3ce29e4cbee5e7185f3b528b4dd1bc"
    assert fingerprint(0.0, 0.0) == fingerprint(-1e-7, -1e-7)
