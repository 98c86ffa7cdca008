"""MinIO/S3 implementation of the object store."""

import asyncio
import io
import json
import threading
import time
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, BinaryIO

from minio import Minio
from minio.error import S3Error

from videotube.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobStorageBase,
    ByteSource,
    DeliveryMode,
    HealthStatus,
    ProgressCallback,
    plan_upload,
)
from videotube.commons.telemetry import get_logger
from videotube.domain.exceptions import UploadError
from videotube.domain.value_objects import ByteRange

logger = get_logger(__name__)


class BlobNotFoundError(Exception):
    """Raised when a blob is not found."""

    def __init__(self, bucket: str, path: str) -> None:
        self.bucket = bucket
        self.path = path
        super().__init__(f"Blob not found: {bucket}/{path}")


def public_read_policy(bucket: str) -> dict[str, Any]:
    """Bucket policy letting anonymous clients GET any object."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"AWS": ["*"]},
                "Action": ["s3:GetObject"],
                "Resource": [f"arn:aws:s3:::{bucket}/*"],
            }
        ],
    }


class _UploadProgress(threading.Thread):
    """Adapts minio's progress protocol to a fraction callback.

    minio calls ``set_meta`` once and ``update`` per chunk read; it is never
    started as a thread.
    """

    def __init__(self, key: str, callback: ProgressCallback | None) -> None:
        super().__init__(daemon=True)
        self._key = key
        self._callback = callback
        self._total = 0
        self._sent = 0
        self._last_logged = -1

    def set_meta(self, object_name: str, total_length: int) -> None:
        self._total = total_length

    def update(self, size: int) -> None:
        self._sent += size
        fraction = min(1.0, self._sent / self._total) if self._total else 1.0
        percent = int(fraction * 100)
        if percent // 10 > self._last_logged // 10:
            self._last_logged = percent
            logger.info(
                "Upload progress",
                extra={"key": self._key, "percent": percent, "sent": self._sent},
            )
        if self._callback is not None:
            self._callback(fraction)


class MinioBlobStorage(BlobStorageBase):
    """Object store backed by the minio SDK.

    Works against MinIO (local development), AWS S3 and Cloudflare R2. Large
    objects are sent as multipart uploads with a bounded number of parts in
    flight; smaller ones go up in a single request.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        region: str | None = None,
        delivery: DeliveryMode = DeliveryMode.DIRECT,
        public_url: str | None = None,
        presigned_expiry_seconds: int = 3600,
        multipart_threshold_bytes: int = 100 * 1024 * 1024,
        part_size_bytes: int = 100 * 1024 * 1024,
        max_concurrent_parts: int = 4,
        upload_timeout_seconds: float | None = None,
        media_route: str = "/api/media",
        client: Minio | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            bucket: Bucket every key lives in.
            secure: Use HTTPS connection.
            region: Region (optional, for S3).
            delivery: Direct public URLs or presigned URLs.
            public_url: Public base URL for the bucket in direct mode;
                defaults to ``{scheme}://{endpoint}/{bucket}``.
            presigned_expiry_seconds: Lifetime of presigned URLs.
            multipart_threshold_bytes: Objects at or above this size use
                multipart upload.
            part_size_bytes: Size of each multipart part.
            max_concurrent_parts: Parts in flight at once.
            upload_timeout_seconds: Upper bound for one ``put``.
            media_route: API path that redirects to presigned URLs.
            client: Preconfigured minio client (tests).
        """
        self._client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        self._secure = secure
        self._bucket = bucket
        self._delivery = DeliveryMode(delivery)
        scheme = "https" if secure else "http"
        default_url = f"{scheme}://{endpoint}/{bucket}"
        self._public_url = (public_url or default_url).rstrip("/")
        self._presigned_expiry = presigned_expiry_seconds
        self._multipart_threshold = multipart_threshold_bytes
        self._part_size = part_size_bytes
        self._max_concurrent_parts = max_concurrent_parts
        self._upload_timeout = upload_timeout_seconds
        self._media_route = media_route.rstrip("/")

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def delivery(self) -> DeliveryMode:
        return self._delivery

    async def put(
        self,
        key: str,
        source: ByteSource,
        size_hint: int | None = None,
        content_type: str = "application/octet-stream",
        progress: ProgressCallback | None = None,
    ) -> BlobMetadata:
        """Store an object, choosing single-shot or multipart by size."""
        loop = asyncio.get_event_loop()

        def _upload() -> None:
            if isinstance(source, Path):
                length = size_hint if size_hint is not None else source.stat().st_size
                with source.open("rb") as handle:
                    self._put_stream(key, handle, length, content_type, progress)
                return
            if isinstance(source, bytes):
                data: BinaryIO = io.BytesIO(source)
                length = len(source)
            else:
                data = source
                if size_hint is not None:
                    length = size_hint
                else:
                    data.seek(0, io.SEEK_END)
                    length = data.tell()
                    data.seek(0)
            self._put_stream(key, data, length, content_type, progress)

        try:
            await asyncio.wait_for(
                loop.run_in_executor(None, _upload), timeout=self._upload_timeout
            )
        except TimeoutError as e:
            raise UploadError(
                key, f"timed out after {self._upload_timeout}s"
            ) from e
        except (S3Error, OSError, ValueError) as e:
            raise UploadError(key, str(e)) from e

        return await self.stat(key)

    def _put_stream(
        self,
        key: str,
        data: BinaryIO,
        length: int,
        content_type: str,
        progress: ProgressCallback | None,
    ) -> None:
        plan = plan_upload(length, self._multipart_threshold, self._part_size)
        logger.info(
            "Uploading object",
            extra={
                "key": key,
                "size_bytes": length,
                "multipart": plan.multipart,
                "part_count": plan.part_count,
            },
        )
        self._client.put_object(
            bucket_name=self._bucket,
            object_name=key,
            data=data,
            length=length,
            content_type=content_type,
            part_size=plan.part_size,
            num_parallel_uploads=self._max_concurrent_parts if plan.multipart else 1,
            progress=_UploadProgress(key, progress),
        )

    async def get(  # type: ignore[override]
        self,
        key: str,
        byte_range: ByteRange | None = None,
        chunk_size: int = 64 * 1024,
    ) -> AsyncIterator[bytes]:
        """Stream an object, or an inclusive window of it, in chunks."""
        loop = asyncio.get_event_loop()
        offset = byte_range.start if byte_range else 0
        length = byte_range.length if byte_range else 0

        def _open() -> Any:
            return self._client.get_object(
                bucket_name=self._bucket,
                object_name=key,
                offset=offset,
                length=length,
            )

        try:
            response = await loop.run_in_executor(None, _open)
        except S3Error as e:
            if e.code == "NoSuchKey":
                raise BlobNotFoundError(self._bucket, key) from e
            raise

        try:
            while True:
                chunk: bytes = await loop.run_in_executor(
                    None, response.read, chunk_size
                )
                if not chunk:
                    break
                yield chunk
        finally:
            response.close()
            response.release_conn()

    async def stat(self, key: str) -> BlobMetadata:
        """Get object metadata without downloading."""
        loop = asyncio.get_event_loop()

        def _stat() -> BlobMetadata:
            try:
                stat = self._client.stat_object(
                    bucket_name=self._bucket, object_name=key
                )
            except S3Error as e:
                if e.code in ("NoSuchKey", "NoSuchObject"):
                    raise BlobNotFoundError(self._bucket, key) from e
                raise
            return BlobMetadata(
                path=key,
                size_bytes=stat.size or 0,
                content_type=stat.content_type or "application/octet-stream",
                created_at=stat.last_modified or datetime.now(UTC),
                etag=stat.etag or "",
            )

        return await loop.run_in_executor(None, _stat)

    async def exists(self, key: str) -> bool:
        try:
            await self.stat(key)
        except BlobNotFoundError:
            return False
        return True

    async def list_blobs(
        self,
        prefix: str = "",
        max_results: int = 1000,
    ) -> list[BlobMetadata]:
        """List objects under a key prefix."""
        loop = asyncio.get_event_loop()

        def _list() -> list[BlobMetadata]:
            objects = self._client.list_objects(
                bucket_name=self._bucket,
                prefix=prefix,
                recursive=True,
            )
            results: list[BlobMetadata] = []
            for obj in objects:
                if len(results) >= max_results:
                    break
                results.append(
                    BlobMetadata(
                        path=obj.object_name or "",
                        size_bytes=obj.size or 0,
                        content_type="application/octet-stream",
                        created_at=obj.last_modified or datetime.now(UTC),
                        etag=obj.etag or "",
                    )
                )
            return results

        return await loop.run_in_executor(None, _list)

    async def presigned_url(self, key: str, expiry_seconds: int | None = None) -> str:
        loop = asyncio.get_event_loop()
        expires = timedelta(seconds=expiry_seconds or self._presigned_expiry)

        def _presign() -> str:
            return str(
                self._client.presigned_get_object(
                    bucket_name=self._bucket,
                    object_name=key,
                    expires=expires,
                )
            )

        return await loop.run_in_executor(None, _presign)

    def resolve_url(self, key: str) -> str:
        """Public object URL in direct mode, redirecting API path when signed."""
        if self._delivery is DeliveryMode.SIGNED:
            return f"{self._media_route}/{key}"
        return f"{self._public_url}/{key}"

    async def ensure_bucket(self) -> bool:
        """Create the bucket if missing; direct mode also makes it public-read."""
        loop = asyncio.get_event_loop()

        def _ensure() -> bool:
            created = False
            if not self._client.bucket_exists(bucket_name=self._bucket):
                self._client.make_bucket(bucket_name=self._bucket)
                created = True
            if self._delivery is DeliveryMode.DIRECT:
                self._client.set_bucket_policy(
                    bucket_name=self._bucket,
                    policy=json.dumps(public_read_policy(self._bucket)),
                )
            return created

        created = await loop.run_in_executor(None, _ensure)
        logger.info(
            "Bucket ready",
            extra={
                "bucket": self._bucket,
                "bucket_created": created,
                "delivery": self._delivery.value,
            },
        )
        return created

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(
                None, lambda: self._client.bucket_exists(bucket_name=self._bucket)
            )
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="Object store is healthy",
                details={"endpoint": self._endpoint, "bucket": self._bucket},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Object store health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
