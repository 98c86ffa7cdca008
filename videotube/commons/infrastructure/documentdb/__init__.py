"""Document database abstractions and implementations."""

from videotube.commons.infrastructure.documentdb.base import (
    DocumentDBBase,
    DuplicateDocumentError,
)
from videotube.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    "DuplicateDocumentError",
    # Implementations
    "MongoDBDocumentDB",
]
