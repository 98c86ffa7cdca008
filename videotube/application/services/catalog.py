"""Read access to stored videos."""

from typing import Any

from videotube.commons.infrastructure.blob import BlobStorageBase
from videotube.commons.infrastructure.documentdb import DocumentDBBase
from videotube.commons.settings.models import Settings
from videotube.commons.telemetry import get_logger
from videotube.domain.exceptions import VideoNotFoundError
from videotube.domain.models import MediaAsset

logger = get_logger(__name__)


class VideoCatalogService:
    """Lists and looks up media assets, resolving their thumbnail URLs."""

    def __init__(
        self,
        document_db: DocumentDBBase,
        blob_storage: BlobStorageBase,
        settings: Settings,
    ) -> None:
        self._document_db = document_db
        self._blob = blob_storage
        self._videos_collection = settings.document_db.collections.videos

    def thumbnail_urls(self, asset: MediaAsset) -> list[str]:
        """Client-facing URLs of every thumbnail, in index order."""
        return [self._blob.resolve_url(key) for key in asset.thumbnail_keys]

    async def list_videos(self) -> list[dict[str, Any]]:
        """All videos, newest first, as API bodies."""
        documents = await self._document_db.find(
            self._videos_collection,
            {},
            limit=0,
            sort=[("created_at", -1)],
        )
        assets = [MediaAsset.from_document(doc) for doc in documents]
        return [asset.to_api(self.thumbnail_urls(asset)) for asset in assets]

    async def get_asset(self, video_id: str) -> MediaAsset:
        """Look up a record without counting a view.

        Raises:
            VideoNotFoundError: If no record has this video ID.
        """
        document = await self._document_db.find_one(
            self._videos_collection, {"video_id": video_id}
        )
        if document is None:
            raise VideoNotFoundError(video_id)
        return MediaAsset.from_document(document)

    async def view_video(self, video_id: str) -> dict[str, Any]:
        """Count one view and return the updated record as an API body.

        The increment happens in the record store, so concurrent views are
        never lost.

        Raises:
            VideoNotFoundError: If no record has this video ID.
        """
        document = await self._document_db.increment(
            self._videos_collection, {"video_id": video_id}, "view_count", 1
        )
        if document is None:
            raise VideoNotFoundError(video_id)
        asset = MediaAsset.from_document(document)
        logger.debug(
            "Video viewed",
            extra={"video_id": video_id, "view_count": asset.view_count},
        )
        return asset.to_api(self.thumbnail_urls(asset))
