"""
app/db/redis.py

Purpose: Redis connection setup for the tile cache

- Initializes the async client with a bounded pool
- Verifies the connection on startup
- Health checks and shutdown
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError
from typing import Optional
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# Global Redis client
_client: Optional[Redis] = None


async def connect_to_redis():
    """
    Creates the Redis client and pings it.
    Called during application startup.
    """
    global _client

    if _client is not None:
        logger.warning("Redis client already initialized")
        return

    client = Redis.from_url(
        settings.REDIS_URL,
        max_connections=10,
        socket_timeout=5,
        socket_connect_timeout=5,
    )

    try:
        await client.ping()
    except RedisError as e:
        await client.aclose()
        logger.critical(f"Failed to connect to Redis: {e}")
        raise ConnectionError("Could not establish Redis connection") from e

    _client = client
    logger.info("✅ Redis connected")


async def close_redis_connection():
    """
    Closes the Redis client.
    Called during application shutdown.
    """
    global _client

    if _client:
        logger.info("Closing Redis connection")
        await _client.aclose()
        _client = None
        logger.info("Redis connection closed")


async def check_redis_health() -> bool:
    """
    Returns:
        True if Redis answers a ping, False otherwise
    """
    if _client is None:
        logger.error("Redis client not initialized")
        return False

    try:
        return bool(await _client.ping())
    except RedisError as e:
        logger.error(f"Redis health check failed: {str(e)}")
        return False


def get_redis() -> Redis:
    """
    Returns the Redis client.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _client is None:
        raise RuntimeError(
            "Redis not initialized. Call connect_to_redis() during startup."
        )
    return _client
