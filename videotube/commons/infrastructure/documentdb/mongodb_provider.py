"""MongoDB implementation of the record store."""

import time
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from videotube.commons.infrastructure.blob.base import HealthStatus
from videotube.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DuplicateDocumentError,
)


def _to_mongo(document: dict[str, Any]) -> dict[str, Any]:
    doc = document.copy()
    # The domain 'id' becomes MongoDB's '_id'
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _from_mongo(doc: dict[str, Any]) -> dict[str, Any]:
    result = dict(doc)
    if "_id" in result:
        result["id"] = str(result.pop("_id"))
    return result


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB record store.

    Uses Motor for async operations.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        client: AsyncIOMotorClient[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
            client: Preconfigured Motor client (tests).
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = (
            client or AsyncIOMotorClient(connection_string)
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name

    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document, storing its 'id' as '_id'."""
        try:
            result = await self._db[collection].insert_one(_to_mongo(document))
        except DuplicateKeyError as e:
            raise DuplicateDocumentError(collection, str(e.details or e)) from e
        return str(result.inserted_id)

    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters, with 'id' restored from '_id'."""
        cursor = self._db[collection].find(filters)

        if sort:
            cursor = cursor.sort(sort)

        cursor = cursor.skip(skip).limit(limit)

        return [_from_mongo(doc) async for doc in cursor]

    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        doc = await self._db[collection].find_one(filters)
        return _from_mongo(doc) if doc else None

    async def increment(
        self,
        collection: str,
        filters: dict[str, Any],
        field: str,
        amount: int = 1,
    ) -> dict[str, Any] | None:
        """Apply ``$inc`` server-side and return the updated document."""
        doc = await self._db[collection].find_one_and_update(
            filters,
            {"$inc": {field: amount}},
            return_document=ReturnDocument.AFTER,
        )
        return _from_mongo(doc) if doc else None

    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""
        if filters:
            count = await self._db[collection].count_documents(filters)
            return int(count)
        count = await self._db[collection].estimated_document_count()
        return int(count)

    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection."""
        kwargs: dict[str, Any] = {"unique": unique}
        if name:
            kwargs["name"] = name
        index_name = await self._db[collection].create_index(fields, **kwargs)
        return str(index_name)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MongoDB is healthy",
                details={"database": self._database_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
