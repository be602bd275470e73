import pytest

from models.map_models import Coordinates, Marker, MarkerContent


def make_marker(marker_id, lat=35.0, lng=135.0, next_ids=None, title=None):
    return Marker(
        id=marker_id,
        coordinates=Coordinates(latitude=lat, longitude=lng),
        content=MarkerContent(id=marker_id, title=title or marker_id, next=list(next_ids or [])),
    )


@pytest.fixture
def abc_markers():
    """A -> B -> C, roughly 150 m apart."""
    return [
        make_marker("A", 35.0000, 135.0000, ["B"]),
        make_marker("B", 35.0010, 135.0010, ["C"]),
        make_marker("C", 35.0020, 135.0020),
    ]
