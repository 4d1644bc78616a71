"""
app/db/mongo.py

Purpose: MongoDB lifecycle

- Connects once at startup (ping with backoff) and owns the client,
  the database handle and the DocumentStore built on it
- get_store() is the FastAPI dependency every service is wired through
- Round-trip ping for the health endpoint
"""

import asyncio
import time
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from app.core.config import settings
from app.core.logging import get_logger
from app.db.store import MongoDocumentStore

logger = get_logger(__name__)

CONNECT_ATTEMPTS = 3
FIRST_BACKOFF_SECONDS = 2

_client: Optional[AsyncIOMotorClient] = None
_store: Optional[MongoDocumentStore] = None


def _new_client() -> AsyncIOMotorClient:
    return AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=20,
        serverSelectionTimeoutMS=5000,
        retryWrites=True,
    )


async def connect_to_mongo() -> MongoDocumentStore:
    """
    Connects, verifies with a ping and builds the document store.

    Raises:
        ConnectionError: Every attempt failed
    """
    global _client, _store

    if _store is not None:
        return _store

    backoff = FIRST_BACKOFF_SECONDS
    for attempt in range(1, CONNECT_ATTEMPTS + 1):
        client = _new_client()
        try:
            await client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            client.close()
            logger.error(f"MongoDB unreachable (attempt {attempt}/{CONNECT_ATTEMPTS}): {e}")
            if attempt == CONNECT_ATTEMPTS:
                raise ConnectionError("Could not establish MongoDB connection") from e
            await asyncio.sleep(backoff)
            backoff *= 2
            continue

        _client = client
        _store = MongoDocumentStore(client[settings.MONGODB_DB_NAME])
        logger.info(f"✅ Connected to MongoDB: {settings.MONGODB_DB_NAME}")
        return _store


async def close_mongo_connection():
    global _client, _store

    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    _store = None


def get_store() -> MongoDocumentStore:
    """
    Returns the store built by connect_to_mongo().

    Raises:
        RuntimeError: Called before startup connected
    """
    if _store is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")
    return _store


def get_database() -> AsyncIOMotorDatabase:
    return get_store().db


async def database_status() -> Dict[str, Any]:
    """
    Pings the server; reports latency or the failure.
    """
    if _client is None:
        return {"healthy": False, "error": "not connected"}

    started = time.perf_counter()
    try:
        await _client.admin.command("ping")
    except PyMongoError as e:
        logger.error(f"Database ping failed: {e}")
        return {"healthy": False, "error": str(e)}
    return {"healthy": True, "pingMs": round((time.perf_counter() - started) * 1000, 1)}
