import pytest

from app.core.exceptions import InvalidInputError
from utils.geo_utils import lat_lon_to_tile


def test_saint_petersburg_tile():
    x, y = lat_lon_to_tile(59.934280, 30.335098, 15)
    assert (x, y) == (19145, 9527)
    assert lat_lon_to_tile(59.934280, 30.335098, 15) == (x, y)


def test_zoom_zero_is_single_tile():
    assert lat_lon_to_tile(0.0, 0.0, 0) == (0, 0)


def test_origin_at_zoom_one():
    assert lat_lon_to_tile(0.0, 0.0, 1) == (1, 1)


@pytest.mark.parametrize("lat, lon", [(90.0, 180.0), (-90.0, -180.0), (85.0511, 179.9999)])
def test_edges_stay_on_grid(lat, lon):
    zoom = 5
    x, y = lat_lon_to_tile(lat, lon, zoom)
    assert 0 <= x < 2 ** zoom
    assert 0 <= y < 2 ** zoom


@pytest.mark.parametrize("lat, lon, zoom, fragment", [
    (91.0, 0.0, 10, "latitude"),
    (0.0, -181.0, 10, "longitude"),
    (0.0, 0.0, 20, "zoom"),
    (0.0, 0.0, -1, "zoom"),
])
def test_out_of_range_rejected(lat, lon, zoom, fragment):
    with pytest.raises(InvalidInputError) as exc_info:
        lat_lon_to_tile(lat, lon, zoom)
    assert fragment in exc_info.value.message
