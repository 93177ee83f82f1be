from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.exceptions import CacheError
from app.services.tile_cache_service import (
    MIN_CACHE_TTL_SECONDS,
    TileCacheService,
    enforce_ttl_floor,
    tile_cache_key,
)


def test_cache_key_format():
    assert tile_cache_key(59.93428, 30.335098, 13) == "tile_59.934280_30.335098_13"
    assert tile_cache_key(-1.5, 0, 0) == "tile_-1.500000_0.000000_0"


def test_ttl_floor():
    assert MIN_CACHE_TTL_SECONDS == 604800
    assert enforce_ttl_floor(60) == MIN_CACHE_TTL_SECONDS
    assert enforce_ttl_floor(MIN_CACHE_TTL_SECONDS * 2) == MIN_CACHE_TTL_SECONDS * 2


def test_short_ttl_is_raised():
    service = TileCacheService(AsyncMock(), ttl_seconds=3600)
    assert service.ttl_seconds == MIN_CACHE_TTL_SECONDS


@pytest.mark.asyncio
async def test_get_refreshes_ttl():
    redis = AsyncMock()
    redis.getex.return_value = b"png"
    service = TileCacheService(redis, ttl_seconds=MIN_CACHE_TTL_SECONDS)

    assert await service.get("tile_key") == b"png"
    redis.getex.assert_awaited_once_with("tile_key", ex=MIN_CACHE_TTL_SECONDS)


@pytest.mark.asyncio
async def test_get_miss():
    redis = AsyncMock()
    redis.getex.return_value = None
    service = TileCacheService(redis)

    assert await service.get("tile_key") is None


@pytest.mark.asyncio
async def test_set_applies_ttl():
    redis = AsyncMock()
    service = TileCacheService(redis, ttl_seconds=10)

    await service.set("tile_key", b"png")
    redis.set.assert_awaited_once_with("tile_key", b"png", ex=MIN_CACHE_TTL_SECONDS)


@pytest.mark.asyncio
async def test_redis_errors_become_cache_errors():
    redis = AsyncMock()
    redis.getex.side_effect = RedisConnectionError("down")
    redis.set.side_effect = RedisConnectionError("down")
    service = TileCacheService(redis)

    with pytest.raises(CacheError):
        await service.get("tile_key")
    with pytest.raises(CacheError):
        await service.set("tile_key", b"png")
