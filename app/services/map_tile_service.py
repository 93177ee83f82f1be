"""
app/services/map_tile_service.py

Purpose: OpenStreetMap tile retrieval

- Projects (lat, lon, zoom) to a slippy-map tile
- Downloads the PNG from the tile server
- Sends the identifying User-Agent the tile usage policy requires
- Any non-200 answer is an error
"""

import httpx
from typing import Optional, Protocol

from app.core.config import settings
from app.core.exceptions import TileProviderError
from app.core.logging import get_logger
from utils.geo_utils import lat_lon_to_tile

logger = get_logger(__name__)


class TileProvider(Protocol):
    """Source of raster tiles."""

    async def fetch_tile(self, lat: float, lon: float, zoom: int) -> bytes: ...


class OpenStreetMapTileService:
    """
    TileProvider for an OSM-compatible tile server.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or settings.OSM_BASE_URL).rstrip("/")
        self.user_agent = user_agent or settings.OSM_USER_AGENT
        self._timeout = timeout if timeout is not None else settings.OSM_TIMEOUT
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            limits=httpx.Limits(max_keepalive_connections=10, keepalive_expiry=30.0),
        )

    def build_url(self, lat: float, lon: float, zoom: int) -> str:
        """
        Tile URL for the tile containing (lat, lon).

        Raises:
            InvalidInputError: If the coordinate or zoom is out of range
        """
        x, y = lat_lon_to_tile(lat, lon, zoom)
        return f"{self.base_url}/{zoom}/{x}/{y}.png"

    async def fetch_tile(self, lat: float, lon: float, zoom: int) -> bytes:
        """
        Downloads the tile containing a coordinate.

        Args:
            lat: Latitude in degrees
            lon: Longitude in degrees
            zoom: Zoom level 0-19

        Returns:
            PNG bytes

        Raises:
            InvalidInputError: If parameters are out of range
            TileProviderError: On network failure or non-200 status
        """
        url = self.build_url(lat, lon, zoom)
        logger.debug(f"Fetching map tile {url}", extra={"operation": "maptile.fetch_tile"})

        try:
            response = await self._client.get(url, headers={"User-Agent": self.user_agent})
        except httpx.TimeoutException as e:
            logger.error(f"Tile server timeout: {url}")
            raise TileProviderError("Tile server is taking too long to respond") from e
        except httpx.RequestError as e:
            logger.error(f"Network error fetching tile {url}: {e}")
            raise TileProviderError("Unable to connect to tile server") from e

        if response.status_code != 200:
            logger.error(f"Tile fetch failed: {response.status_code} for {url}")
            raise TileProviderError(f"Unexpected status code from tile server: {response.status_code}")

        logger.info(f"Map tile fetched: {url}")
        return response.content

    async def close(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()


# Global tile service instance
_map_tile_service: Optional[OpenStreetMapTileService] = None


def get_map_tile_service() -> OpenStreetMapTileService:
    """Get or create the global tile service instance."""
    global _map_tile_service
    if _map_tile_service is None:
        _map_tile_service = OpenStreetMapTileService()
    return _map_tile_service


async def close_map_tile_service():
    """Close tile service and cleanup resources."""
    global _map_tile_service
    if _map_tile_service:
        await _map_tile_service.close()
        _map_tile_service = None
