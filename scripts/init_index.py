"""
Search index initialization script

Run once to create the users index with its mapping:
    python scripts/init_index.py
    python scripts/init_index.py --recreate   # drops every user first
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from elasticsearch import AsyncElasticsearch
import logging

from app.core.config import settings
from app.db.indexes import create_indexes, drop_indexes

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def init_index(recreate: bool = False):
    """Create the users index and report its mapping."""
    index = settings.ELASTICSEARCH_INDEX

    logger.info(f"🔌 Connecting to Elasticsearch: {settings.ELASTICSEARCH_URL}")
    client = AsyncElasticsearch(
        settings.ELASTICSEARCH_URL,
        request_timeout=settings.ELASTICSEARCH_TIMEOUT,
    )

    try:
        info = await client.info()
        logger.info(f"✅ Connected to cluster {info.get('cluster_name')}\n")

        if recreate:
            logger.info(f"🗑️  Dropping '{index}'...")
            await drop_indexes(client, index)

        logger.info(f"📋 Creating '{index}'...")
        await create_indexes(client, index)

        # ==================== VERIFICATION ====================
        logger.info("\n🔍 Verifying mapping...")
        mapping = await client.indices.get_mapping(index=index)
        properties = mapping[index]["mappings"].get("properties", {})
        for field, definition in sorted(properties.items()):
            logger.info(f"    ✅ {field}: {definition.get('type')}")

        # ==================== STATS ====================
        count = await client.count(index=index)
        logger.info(f"\n📊 Current documents: {count['count']}")

        logger.info("\n✅ Index initialization complete!")

    except Exception as e:
        logger.error(f"\n❌ Error: {e}")
        raise

    finally:
        await client.close()


async def main():
    parser = argparse.ArgumentParser(description="Create the users search index")
    parser.add_argument("--recreate", action="store_true", help="drop the index before creating it")
    args = parser.parse_args()

    logger.info("=" * 60)
    logger.info("  User Service Index Setup")
    logger.info("=" * 60 + "\n")

    await init_index(recreate=args.recreate)

    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
