"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any

from videotube.commons.infrastructure.blob.base import HealthStatus


class DuplicateDocumentError(Exception):
    """Raised when an insert violates a unique index."""

    def __init__(self, collection: str, detail: str) -> None:
        self.collection = collection
        self.detail = detail
        super().__init__(f"Duplicate document in {collection}: {detail}")


class DocumentDBBase(ABC):
    """Record store used for media asset documents.

    Documents carry their identity in an ``id`` field; implementations map it
    to whatever primary key the backend uses.
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        document: dict[str, Any],
    ) -> str:
        """Insert a document.

        Args:
            collection: Collection name.
            document: Document to insert.

        Returns:
            Document ID.

        Raises:
            DuplicateDocumentError: If a unique index rejects the document.
        """

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: list[tuple[str, int]] | None = None,
    ) -> list[dict[str, Any]]:
        """Find documents matching filters.

        Args:
            collection: Collection name.
            filters: Query filters.
            skip: Number of documents to skip.
            limit: Maximum documents to return, 0 for no limit.
            sort: Sort specification [(field, direction)].
                  Direction: 1 for ascending, -1 for descending.

        Returns:
            List of matching documents.
        """

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        filters: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Find a single document matching filters."""

    @abstractmethod
    async def increment(
        self,
        collection: str,
        filters: dict[str, Any],
        field: str,
        amount: int = 1,
    ) -> dict[str, Any] | None:
        """Atomically add ``amount`` to a numeric field of one document.

        Returns:
            The document after the update, or None if nothing matched.
        """

    @abstractmethod
    async def count(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
        name: str | None = None,
    ) -> str:
        """Create an index on the collection.

        Args:
            collection: Collection name.
            fields: Index fields [(field, direction)].
            unique: Whether index should be unique.
            name: Optional index name.

        Returns:
            Index name.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""

    @abstractmethod
    async def close(self) -> None:
        """Release client resources."""
