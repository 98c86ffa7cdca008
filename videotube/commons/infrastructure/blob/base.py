"""Abstract object store capability bound to a single bucket."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from videotube.domain.value_objects import ByteRange

MIN_PART_SIZE = 5 * 1024 * 1024
MAX_PART_SIZE = 5 * 1024 * 1024 * 1024
MAX_PART_COUNT = 10000

ByteSource = Path | BinaryIO | bytes
ProgressCallback = Callable[[float], None]


@dataclass
class BlobMetadata:
    """Metadata for a stored object."""

    path: str
    size_bytes: int
    content_type: str
    created_at: datetime
    etag: str


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class DeliveryMode(str, Enum):
    """How clients reach stored objects."""

    DIRECT = "direct"  # public bucket URL, range requests proxied by us
    SIGNED = "signed"  # time-limited presigned URL, store handles ranges


@dataclass(frozen=True)
class UploadPlan:
    """How one object will be sent to the store."""

    size_bytes: int
    multipart: bool
    part_size: int
    part_count: int


def plan_upload(size_bytes: int, threshold_bytes: int, part_size: int) -> UploadPlan:
    """Choose single-shot or multipart upload for an object of ``size_bytes``.

    Objects smaller than ``threshold_bytes`` go up in one request. Anything
    at or above it is split into ``part_size`` parts; the last part carries
    the remainder.

    Raises:
        ValueError: negative size, a part size outside the S3 limits, or more
            parts than the store accepts.
    """
    if size_bytes < 0:
        raise ValueError(f"size must be >= 0, got {size_bytes}")
    if not MIN_PART_SIZE <= part_size <= MAX_PART_SIZE:
        raise ValueError(
            f"part size must be within [{MIN_PART_SIZE}, {MAX_PART_SIZE}], "
            f"got {part_size}"
        )

    if size_bytes < threshold_bytes:
        return UploadPlan(
            size_bytes=size_bytes,
            multipart=False,
            part_size=max(size_bytes, MIN_PART_SIZE),
            part_count=1,
        )

    part_count = max(1, -(-size_bytes // part_size))
    if part_count > MAX_PART_COUNT:
        raise ValueError(
            f"{size_bytes} bytes needs {part_count} parts of {part_size}; "
            f"the store accepts at most {MAX_PART_COUNT}"
        )
    return UploadPlan(
        size_bytes=size_bytes,
        multipart=True,
        part_size=part_size,
        part_count=part_count,
    )


class BlobStorageBase(ABC):
    """Put/get/stat over one bucket, plus URL resolution for clients.

    Implementations should handle:
    - MinIO (local development)
    - AWS S3 / Cloudflare R2 (S3-compatible endpoints)
    """

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Name of the bucket this client writes to."""

    @property
    @abstractmethod
    def delivery(self) -> DeliveryMode:
        """Configured delivery mode."""

    @abstractmethod
    async def put(
        self,
        key: str,
        source: ByteSource,
        size_hint: int | None = None,
        content_type: str = "application/octet-stream",
        progress: ProgressCallback | None = None,
    ) -> BlobMetadata:
        """Store an object, choosing single-shot or multipart by size.

        Args:
            key: Object key within the bucket.
            source: Local file path, open binary file, or bytes.
            size_hint: Size in bytes when already known.
            content_type: MIME type of the content.
            progress: Called with the uploaded fraction (0.0 to 1.0).

        Returns:
            Metadata of the stored object.

        Raises:
            UploadError: If the store rejects or fails the upload.
        """

    @abstractmethod
    def get(
        self,
        key: str,
        byte_range: ByteRange | None = None,
        chunk_size: int = 64 * 1024,
    ) -> AsyncIterator[bytes]:
        """Stream an object, or the given window of it, in chunks.

        Closing the iterator early releases the upstream connection.

        Raises:
            BlobNotFoundError: If the key does not exist.
        """
        ...

    @abstractmethod
    async def stat(self, key: str) -> BlobMetadata:
        """Get object metadata without downloading.

        Raises:
            BlobNotFoundError: If the key does not exist.
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if an object exists."""

    @abstractmethod
    async def list_blobs(
        self,
        prefix: str = "",
        max_results: int = 1000,
    ) -> list[BlobMetadata]:
        """List objects under a key prefix."""

    @abstractmethod
    async def presigned_url(self, key: str, expiry_seconds: int | None = None) -> str:
        """Generate a time-limited GET URL for one object."""

    @abstractmethod
    def resolve_url(self, key: str) -> str:
        """URL clients should use to fetch ``key`` under the delivery mode."""

    @abstractmethod
    async def ensure_bucket(self) -> bool:
        """Create the bucket if missing.

        Returns:
            True if the bucket was created, False if it already existed.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check connectivity to the store."""
