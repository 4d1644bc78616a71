"""
app/db/indexes.py

Purpose: Database index management

- Recent-orders window (createdAt) and per-user history (userId)
- Admin user listing by last login, ban partition
- TTL index so expired sessions disappear on their own
"""

from typing import Any, Dict, List, Tuple

from pymongo import DESCENDING
from pymongo.errors import OperationFailure

from app.db.mongo import get_database
from app.core.logging import get_logger

logger = get_logger(__name__)

# collection -> [(keys, options)]
INDEXES: Dict[str, List[Tuple[Any, Dict[str, Any]]]] = {
    "orders": [
        ([("createdAt", DESCENDING)], {"name": "orders_created_idx"}),
        ([("userId", 1), ("createdAt", DESCENDING)], {"name": "orders_user_created_idx"}),
        ("status", {"name": "orders_status_idx"}),
    ],
    "users": [
        ([("profile.lastLogin", DESCENDING)], {"name": "users_last_login_idx"}),
        ("profile.telegramId", {"name": "users_telegram_idx", "sparse": True}),
        ("security.isBanned", {"name": "users_banned_idx"}),
    ],
    "sessions": [
        ("expiresAt", {"name": "sessions_expiry_ttl_idx", "expireAfterSeconds": 0}),
    ],
}


async def create_indexes():
    """
    Creates every index in INDEXES. Idempotent.
    """
    db = get_database()
    logger.info("Creating database indexes...")

    for collection, specs in INDEXES.items():
        for keys, options in specs:
            try:
                await db[collection].create_index(keys, **options)
            except OperationFailure as e:
                # an index with the same keys but different options already exists
                logger.error(f"❌ Index {options['name']} on {collection} conflicts: {e}")
                raise
        logger.debug(f"{collection}: {len(specs)} indexes ensured")

    logger.info("✅ All database indexes created successfully")


async def drop_all_indexes():
    """Drops every index except _id (maintenance only)."""
    db = get_database()
    logger.warning("Dropping all database indexes...")
    for collection in INDEXES:
        await db[collection].drop_indexes()
    logger.info("✅ All indexes dropped")
