"""
Storefront Backend — Document Store Client
============================================

What:  Async MongoDB client wrapper with an explicit connect/close lifecycle.
How:   Wraps pymongo's AsyncMongoClient; every operation translates
       PyMongoError into DatabaseError so routes only see our hierarchy.
Who:   Constructed in the app lifespan, stored on `app.state.store`, and
       injected into route handlers via `Depends(get_store)`.
When:  Connected at startup; closed at shutdown.

Document conventions:
    - `_id` is an ObjectId assigned by MongoDB
    - `createdAt` / `updatedAt` are UTC datetimes stamped on insert
    - Documents are plain dicts; shapes live in storefront.models
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from storefront.exceptions import DatabaseError

logger = logging.getLogger(__name__)

SortSpec = Sequence[Tuple[str, int]]


def to_object_id(value: str) -> Optional[ObjectId]:
    """Returns an ObjectId for a valid hex id, None otherwise."""
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


class DocumentStore:
    """
    Thin async facade over one MongoDB database.

    Lifecycle:
        store = DocumentStore(url, "storefront")
        await store.connect()      # creates the client, pings the server
        ...                        # insert / find_all / delete_by_id
        await store.close()        # releases pooled connections
    """

    def __init__(self, url: str, db_name: str, timeout_ms: int = 5000):
        self.url = url
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self._client: Optional[AsyncMongoClient] = None
        self._db = None

    @property
    def db(self):
        if self._db is None:
            raise DatabaseError(
                message="Database is not connected",
                context={"db_name": self.db_name},
            )
        return self._db

    async def connect(self) -> None:
        """
        Create the client and verify connectivity.

        An unreachable server is logged, not raised: the client reconnects
        lazily and individual operations surface DatabaseError instead.
        """
        self._client = AsyncMongoClient(
            self.url,
            serverSelectionTimeoutMS=self.timeout_ms,
            tz_aware=True,
        )
        self._db = self._client[self.db_name]
        if await self.ping():
            logger.info("MongoDB connected: db=%s", self.db_name)
        else:
            logger.error("MongoDB not reachable at startup: db=%s", self.db_name)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._db = None

    async def ping(self) -> bool:
        """Lightweight connectivity check used by startup and /health."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", str(e))
            return False

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert one document and return it with `_id` and timestamps set.

        The caller's dict is not mutated.
        """
        now = datetime.now(timezone.utc)
        doc = dict(document)
        doc["createdAt"] = now
        doc["updatedAt"] = now
        try:
            result = await self.db[collection].insert_one(doc)
        except PyMongoError as e:
            logger.error("Insert into %s failed: %s", collection, str(e))
            raise DatabaseError(
                message="Could not save the document. Please try again.",
                context={"collection": collection, "error_type": type(e).__name__, "error": str(e)},
            ) from e
        doc["_id"] = result.inserted_id
        logger.info("Inserted %s document %s", collection, result.inserted_id)
        return doc

    async def find_all(
        self,
        collection: str,
        sort: Optional[SortSpec] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self.db[collection].find({})
            if sort:
                cursor = cursor.sort(list(sort))
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Query on %s failed: %s", collection, str(e))
            raise DatabaseError(
                message="Could not fetch documents. Please try again.",
                context={"collection": collection, "error_type": type(e).__name__, "error": str(e)},
            ) from e

    async def find_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        try:
            return await self.db[collection].find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("Lookup %s/%s failed: %s", collection, doc_id, str(e))
            raise DatabaseError(
                message="Could not fetch the document. Please try again.",
                context={"collection": collection, "error_type": type(e).__name__, "error": str(e)},
            ) from e

    async def delete_by_id(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Delete one document by id.

        Returns:
            The deleted document, or None when nothing matched (including
            ids that are not valid ObjectIds).
        """
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        try:
            deleted = await self.db[collection].find_one_and_delete({"_id": oid})
        except PyMongoError as e:
            logger.error("Delete %s/%s failed: %s", collection, doc_id, str(e))
            raise DatabaseError(
                message="Could not delete the document. Please try again.",
                context={"collection": collection, "error_type": type(e).__name__, "error": str(e)},
            ) from e
        if deleted is not None:
            logger.info("Deleted %s document %s", collection, doc_id)
        return deleted


# ── Dependency ────────────────────────────────────────────────────────────
def get_store(request: Request) -> DocumentStore:
    """
    FastAPI dependency returning the store created by the lifespan.

    Tests replace it through `app.dependency_overrides[get_store]`.
    """
    return request.app.state.store
