"""
app/services/tile_cache_service.py

Purpose: Cache rendered map tiles in Redis

- Stores PNG bytes under a "tile_<lat>_<lon>_<zoom>" key
- Every read and write (re)applies the TTL
- TTL never drops below 7 days, whatever is configured
"""

from typing import Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.exceptions import CacheError
from app.core.logging import get_logger

logger = get_logger(__name__)

# Server-side floor for tile retention
MIN_CACHE_TTL_SECONDS = 7 * 24 * 3600


class CacheStore(Protocol):
    """Byte cache used for map tiles."""

    async def get(self, key: str) -> Optional[bytes]: ...

    async def set(self, key: str, value: bytes) -> None: ...


def tile_cache_key(lat: float, lon: float, zoom: int) -> str:
    """
    Builds the cache key at fixed six-decimal precision so equal
    coordinates always produce the same key.
    """
    return f"tile_{lat:.6f}_{lon:.6f}_{zoom}"


def enforce_ttl_floor(ttl_seconds: int) -> int:
    """Raises a TTL below the floor up to it."""
    if ttl_seconds < MIN_CACHE_TTL_SECONDS:
        logger.warning(
            f"Cache TTL {ttl_seconds}s is less than 7 days. The parameter has been forcibly changed"
        )
        return MIN_CACHE_TTL_SECONDS
    return ttl_seconds


class TileCacheService:
    """CacheStore backed by Redis."""

    def __init__(self, client: Redis, ttl_seconds: Optional[int] = None):
        self.client = client
        self.ttl_seconds = enforce_ttl_floor(
            settings.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        )

    async def get(self, key: str) -> Optional[bytes]:
        """
        Retrieves cached tile bytes and extends their TTL.

        Returns:
            Tile bytes, or None on a miss

        Raises:
            CacheError: If Redis is unavailable
        """
        try:
            data = await self.client.getex(key, ex=self.ttl_seconds)
        except RedisError as e:
            raise CacheError("Tile cache read failed", details=str(e)) from e

        if data is None:
            logger.debug("Tile cache miss", extra={"cache_key": key})
        else:
            logger.debug("Tile cache hit", extra={"cache_key": key})
        return data

    async def set(self, key: str, value: bytes) -> None:
        """
        Stores tile bytes with the enforced TTL.

        Raises:
            CacheError: If Redis is unavailable
        """
        try:
            await self.client.set(key, value, ex=self.ttl_seconds)
        except RedisError as e:
            raise CacheError("Tile cache write failed", details=str(e)) from e

        logger.debug("Tile cached", extra={"cache_key": key})
