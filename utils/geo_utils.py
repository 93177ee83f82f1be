"""
utils/geo_utils.py

Purpose: Coordinate helpers for slippy-map tiles

- Latitude/longitude range predicates
- (lat, lon, zoom) -> (tile_x, tile_y) under Web Mercator (EPSG:3857)
"""

import math
from typing import Tuple

from app.core.exceptions import InvalidInputError
from utils.constants import (
    LATITUDE_MIN,
    LATITUDE_MAX,
    LONGITUDE_MIN,
    LONGITUDE_MAX,
    ZOOM_MIN,
    ZOOM_MAX,
)


def is_valid_latitude(lat: float) -> bool:
    return LATITUDE_MIN <= lat <= LATITUDE_MAX


def is_valid_longitude(lon: float) -> bool:
    return LONGITUDE_MIN <= lon <= LONGITUDE_MAX


def is_valid_zoom(zoom: int) -> bool:
    return ZOOM_MIN <= zoom <= ZOOM_MAX


def validate_tile_params(lat: float, lon: float, zoom: int) -> None:
    """
    Rejects coordinates the projection is not defined for. No clamping.

    Raises:
        InvalidInputError: naming the violated bound
    """
    if not is_valid_latitude(lat):
        raise InvalidInputError(f"invalid latitude: {lat:f} (must be between -90 and 90)")
    if not is_valid_longitude(lon):
        raise InvalidInputError(f"invalid longitude: {lon:f} (must be between -180 and 180)")
    if not is_valid_zoom(zoom):
        raise InvalidInputError(f"invalid zoom level: {zoom} (must be between {ZOOM_MIN} and {ZOOM_MAX})")


def lat_lon_to_tile(lat: float, lon: float, zoom: int) -> Tuple[int, int]:
    """
    Projects a coordinate to the slippy-map tile containing it.

    n = 2^zoom
    x = floor((lon + 180) / 360 * n)
    y = floor((1 - ln(tan(lat) + sec(lat)) / pi) / 2 * n)

    Args:
        lat: Latitude in degrees, [-90, 90]
        lon: Longitude in degrees, [-180, 180]
        zoom: Zoom level, [0, 19]

    Returns:
        (tile_x, tile_y)

    Raises:
        InvalidInputError: If any argument is out of range
    """
    validate_tile_params(lat, lon, zoom)

    n = 2 ** zoom
    lat_rad = math.radians(lat)

    x = math.floor((lon + 180.0) / 360.0 * n)
    # ln(tan + sec) == asinh(tan), which stays finite at the poles
    y = math.floor((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)

    # lon = 180 and lat = +-90 fall on the far edge of the grid
    x = min(max(x, 0), n - 1)
    y = min(max(y, 0), n - 1)

    return int(x), int(y)
