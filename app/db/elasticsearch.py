"""
app/db/elasticsearch.py

Purpose: Elasticsearch connection setup

- Initializes the async client
- Verifies the cluster on startup with retry logic
- Health checks
- Proper connection lifecycle management
"""

from elasticsearch import AsyncElasticsearch, ConnectionError as ESConnectionError, ConnectionTimeout
from typing import Optional
import asyncio
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# Global Elasticsearch client
_client: Optional[AsyncElasticsearch] = None


async def connect_to_elasticsearch():
    """
    Establishes connection to Elasticsearch with retry logic.
    Called during application startup.
    """
    global _client

    if _client is not None:
        logger.warning("Elasticsearch client already initialized")
        return

    max_retries = 3
    retry_delay = 2

    for attempt in range(1, max_retries + 1):
        client = AsyncElasticsearch(
            settings.ELASTICSEARCH_URL,
            request_timeout=settings.ELASTICSEARCH_TIMEOUT,
        )
        try:
            logger.info(
                f"Attempting to connect to Elasticsearch (attempt {attempt}/{max_retries})"
            )

            info = await client.info()
            _client = client

            logger.info(
                f"✅ Connected to Elasticsearch cluster: {info.get('cluster_name')} "
                f"(version {info.get('version', {}).get('number')})"
            )
            return

        except (ESConnectionError, ConnectionTimeout) as e:
            await client.close()
            logger.error(
                f"Failed to connect to Elasticsearch (attempt {attempt}/{max_retries}): {e}"
            )

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to Elasticsearch after all retries")
                raise ConnectionError("Could not establish Elasticsearch connection") from e


async def close_elasticsearch_connection():
    """
    Closes the Elasticsearch client.
    Called during application shutdown.
    """
    global _client

    if _client:
        logger.info("Closing Elasticsearch connection")
        await _client.close()
        _client = None
        logger.info("Elasticsearch connection closed")


async def check_elasticsearch_health() -> bool:
    """
    Checks if the cluster answers.

    Returns:
        True if connection is healthy, False otherwise
    """
    if _client is None:
        logger.error("Elasticsearch client not initialized")
        return False

    try:
        return await _client.ping()
    except Exception as e:
        logger.error(f"Elasticsearch health check failed: {str(e)}")
        return False


def get_elasticsearch() -> AsyncElasticsearch:
    """
    Returns the Elasticsearch client.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _client is None:
        raise RuntimeError(
            "Elasticsearch not initialized. Call connect_to_elasticsearch() during startup."
        )
    return _client
