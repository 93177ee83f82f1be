"""
app/db/indexes.py

Purpose: Search index management

- Creates the users index with its field mapping
- Text fields keep a keyword sub-field for exact sorting
- location is a geo_point for radius queries
- social_net is lower-cased at index and query time, so term filters ignore case
"""

from typing import Optional

from elasticsearch import AsyncElasticsearch

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def _text_with_keyword() -> dict:
    return {"type": "text", "fields": {"keyword": {"type": "keyword"}}}


USERS_INDEX_SETTINGS = {
    "analysis": {
        "normalizer": {
            "social_net_normalizer": {"type": "custom", "filter": ["lowercase"]},
        }
    }
}

USERS_INDEX_MAPPINGS = {
    "properties": {
        "login": _text_with_keyword(),
        "username": _text_with_keyword(),
        "password": {"type": "keyword", "index": False},
        "description": _text_with_keyword(),
        "comment": _text_with_keyword(),
        "reg_date": {"type": "date"},
        "location": {"type": "geo_point"},
        "social_net": {"type": "keyword", "normalizer": "social_net_normalizer"},
    }
}


async def create_indexes(client: AsyncElasticsearch, index: Optional[str] = None):
    """
    Creates the users index if it does not exist.
    This function is idempotent - safe to run multiple times.
    """
    index = index or settings.ELASTICSEARCH_INDEX

    try:
        if await client.indices.exists(index=index):
            logger.debug(f"Index exists: {index}")
            return

        logger.info(f"Index not found, creating: {index}")
        await client.indices.create(
            index=index,
            settings=USERS_INDEX_SETTINGS,
            mappings=USERS_INDEX_MAPPINGS,
        )
        logger.info(f"✅ Index created: {index}")

    except Exception as e:
        logger.error(f"Failed to create index {index}: {str(e)}", exc_info=True)
        raise


async def drop_indexes(client: AsyncElasticsearch, index: Optional[str] = None):
    """
    Deletes the users index and every document in it.
    Use with caution! Only for maintenance/migration.
    """
    index = index or settings.ELASTICSEARCH_INDEX

    try:
        logger.warning(f"Dropping index: {index}")
        await client.indices.delete(index=index, ignore_unavailable=True)
        logger.info(f"✅ Index dropped: {index}")

    except Exception as e:
        logger.error(f"Failed to drop index {index}: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create the index manually.
    """
    import asyncio
    from app.db.elasticsearch import (
        connect_to_elasticsearch,
        close_elasticsearch_connection,
        get_elasticsearch,
    )

    async def main():
        await connect_to_elasticsearch()
        await create_indexes(get_elasticsearch())
        await close_elasticsearch_connection()

    asyncio.run(main())
