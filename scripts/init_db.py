"""
Database initialization script for the storefront

Creates (or rebuilds) the indexes and prints collection stats:
    python scripts/init_db.py
    python scripts/init_db.py --rebuild
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

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.db.indexes import INDEXES, create_indexes, drop_all_indexes
from app.db.mongo import close_mongo_connection, connect_to_mongo, get_database

setup_logging()
logger = get_logger("scripts.init_db")


async def main(rebuild: bool = False):
    logger.info("=" * 60)
    logger.info(f"  Storefront database setup ({settings.MONGODB_DB_NAME})")
    logger.info("=" * 60)

    await connect_to_mongo()
    try:
        if rebuild:
            await drop_all_indexes()
        await create_indexes()

        db = get_database()
        for name in INDEXES:
            indexes = await db[name].index_information()
            count = await db[name].count_documents({})
            logger.info(f"📋 {name}: {count} documents")
            for idx_name in indexes:
                if idx_name != "_id_":
                    logger.info(f"    ✅ {idx_name}")

        logger.info("✅ Database initialization complete!")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create storefront indexes")
    parser.add_argument("--rebuild", action="store_true", help="drop custom indexes first")
    args = parser.parse_args()
    asyncio.run(main(rebuild=args.rebuild))
