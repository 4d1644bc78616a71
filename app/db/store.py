"""
app/db/store.py

Purpose: Path-addressed document store

- users/{uid}/profile, users/{uid}/security, orders/{id}, sessions/{id}
- get / set (replace) / update (partial merge) / new_key / last-N window / children
- Every multi-field change is a single write
- Mongo mapping: collection / document _id / dotted field path
"""

from typing import Any, Dict, List, Optional, Protocol, Tuple

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from app.core.exceptions import StoreError
from app.core.logging import get_logger

logger = get_logger(__name__)


def split_path(path: str) -> Tuple[str, Optional[str], List[str]]:
    """
    Splits ``users/abc/profile`` into ``("users", "abc", ["profile"])``.
    """
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise ValueError("Empty store path")
    collection = parts[0]
    doc_id = parts[1] if len(parts) > 1 else None
    return collection, doc_id, parts[2:]


def strip_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


class DocumentStore(Protocol):
    """Storage contract the services depend on."""

    async def get(self, path: str) -> Optional[Dict[str, Any]]: ...

    async def set(self, path: str, data: Dict[str, Any]) -> None: ...

    async def update(self, path: str, fields: Dict[str, Any]) -> None: ...

    def new_key(self, collection: str) -> str: ...

    async def last(self, collection: str, limit: int, order_by: str) -> List[Dict[str, Any]]: ...

    async def children(self, collection: str) -> Dict[str, Dict[str, Any]]: ...


class MongoDocumentStore:
    """
    DocumentStore backed by Motor.

    ``None`` values are dropped on ``set`` and unset on ``update``, so a
    field written as ``None`` reads back as absent.
    """

    def __init__(self, database):
        self.db = database

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        collection, doc_id, fields = split_path(path)
        if doc_id is None:
            raise ValueError(f"get() needs a document path, got {path!r}")
        try:
            doc = await self.db[collection].find_one({"_id": doc_id})
        except PyMongoError as e:
            logger.error(f"❌ Store read failed for {path}: {e}")
            raise StoreError(f"Failed to read {path}") from e

        if doc is None:
            return None
        doc.pop("_id", None)
        for field in fields:
            if not isinstance(doc, dict) or field not in doc:
                return None
            doc = doc[field]
        return doc

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        collection, doc_id, fields = split_path(path)
        if doc_id is None:
            raise ValueError(f"set() needs a document path, got {path!r}")
        data = strip_none(data)
        try:
            if fields:
                await self.db[collection].update_one(
                    {"_id": doc_id},
                    {"$set": {".".join(fields): data}},
                    upsert=True
                )
            else:
                await self.db[collection].replace_one({"_id": doc_id}, data, upsert=True)
        except PyMongoError as e:
            logger.error(f"❌ Store write failed for {path}: {e}")
            raise StoreError(f"Failed to write {path}") from e

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        collection, doc_id, prefix = split_path(path)
        if doc_id is None:
            raise ValueError(f"update() needs a document path, got {path!r}")

        to_set = {}
        to_unset = {}
        for key, value in fields.items():
            dotted = ".".join(prefix + [key])
            if value is None:
                to_unset[dotted] = ""
            else:
                to_set[dotted] = value

        operation: Dict[str, Any] = {}
        if to_set:
            operation["$set"] = to_set
        if to_unset:
            operation["$unset"] = to_unset
        if not operation:
            return

        try:
            await self.db[collection].update_one({"_id": doc_id}, operation, upsert=True)
        except PyMongoError as e:
            logger.error(f"❌ Store update failed for {path}: {e}")
            raise StoreError(f"Failed to update {path}") from e

    def new_key(self, collection: str) -> str:
        # ObjectIds sort by creation time
        return str(ObjectId())

    async def last(self, collection: str, limit: int, order_by: str) -> List[Dict[str, Any]]:
        try:
            cursor = self.db[collection].find({}).sort(order_by, DESCENDING).limit(limit)
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            logger.error(f"❌ Store query failed for {collection}: {e}")
            raise StoreError(f"Failed to read {collection}") from e

        for doc in docs:
            doc.pop("_id", None)
        return docs

    async def children(self, collection: str) -> Dict[str, Dict[str, Any]]:
        try:
            docs = await self.db[collection].find({}).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"❌ Store query failed for {collection}: {e}")
            raise StoreError(f"Failed to read {collection}") from e

        return {str(doc.pop("_id")): doc for doc in docs}

