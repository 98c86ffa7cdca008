"""HTTP byte-range streaming of stored objects."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from videotube.commons.infrastructure.blob import (
    BlobNotFoundError,
    BlobStorageBase,
    DeliveryMode,
)
from videotube.commons.telemetry import get_logger
from videotube.domain.exceptions import StreamError, VideoNotFoundError
from videotube.domain.models import VIDEO_CONTENT_TYPE
from videotube.domain.value_objects import ByteRange

logger = get_logger(__name__)


@dataclass
class StreamReply:
    """Everything the HTTP layer needs to answer a stream request.

    Exactly one of ``body`` and ``redirect_url`` is set.
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: AsyncIterator[bytes] | None = None
    redirect_url: str | None = None
    media_type: str = VIDEO_CONTENT_TYPE


class RangeStreamResponder:
    """Serves whole objects (200) or single byte windows (206).

    In signed delivery mode the client is redirected to a presigned URL and
    the store answers range requests itself.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._blob = blob_storage
        self._chunk_size = chunk_size

    async def respond(
        self,
        key: str,
        range_header: str | None = None,
        content_type: str = VIDEO_CONTENT_TYPE,
    ) -> StreamReply:
        """Plan the reply for ``key`` and an optional ``Range`` header.

        Raises:
            VideoNotFoundError: If the object does not exist.
            RangeNotSatisfiableError: If the header is malformed or outside
                the object.
        """
        if self._blob.delivery is DeliveryMode.SIGNED:
            return await self.redirect(key)

        try:
            metadata = await self._blob.stat(key)
        except BlobNotFoundError as e:
            raise VideoNotFoundError(key) from e
        size = metadata.size_bytes

        headers = {"Accept-Ranges": "bytes"}
        if range_header:
            byte_range = ByteRange.parse(range_header, size)
            headers["Content-Range"] = byte_range.content_range(size)
            headers["Content-Length"] = str(byte_range.length)
            logger.debug(
                "Serving byte range",
                extra={"key": key, "start": byte_range.start, "end": byte_range.end},
            )
            return StreamReply(
                status_code=206,
                headers=headers,
                body=self._body(key, byte_range, byte_range.length),
                media_type=content_type,
            )

        headers["Content-Length"] = str(size)
        return StreamReply(
            status_code=200,
            headers=headers,
            body=self._body(key, None, size),
            media_type=content_type,
        )

    async def redirect(self, key: str) -> StreamReply:
        """Redirect to the object's URL under the delivery mode.

        Raises:
            VideoNotFoundError: If the object does not exist.
        """
        if not await self._blob.exists(key):
            raise VideoNotFoundError(key)
        if self._blob.delivery is DeliveryMode.SIGNED:
            url = await self._blob.presigned_url(key)
        else:
            url = self._blob.resolve_url(key)
        return StreamReply(status_code=307, redirect_url=url)

    async def _body(
        self, key: str, byte_range: ByteRange | None, budget: int
    ) -> AsyncIterator[bytes]:
        """Yield exactly ``budget`` bytes, then close the upstream fetch."""
        remaining = budget
        chunks = self._blob.get(key, byte_range, self._chunk_size)
        try:
            async for chunk in chunks:
                if remaining <= 0:
                    break
                if len(chunk) > remaining:
                    chunk = chunk[:remaining]
                remaining -= len(chunk)
                if chunk:
                    yield chunk
                if remaining <= 0:
                    break
        except Exception as e:
            logger.error(
                "Stream aborted",
                extra={"key": key, "sent": budget - remaining, "error": str(e)},
            )
            raise StreamError(key, str(e)) from e
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

        if remaining > 0:
            logger.error(
                "Stream ended early",
                extra={"key": key, "sent": budget - remaining, "expected": budget},
            )
            raise StreamError(key, f"store ended {remaining} bytes early")
