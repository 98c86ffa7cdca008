"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from videotube.commons.infrastructure.blob import (
    BlobStorageBase,
    DeliveryMode,
    MinioBlobStorage,
)
from videotube.commons.infrastructure.documentdb import (
    DocumentDBBase,
    MongoDBDocumentDB,
)
from videotube.commons.settings.models import DocumentDBSettings, Settings
from videotube.commons.telemetry import get_logger
from videotube.infrastructure.video import (
    FFmpegThumbnailGenerator,
    FFprobeMetadataExtractor,
    MetadataExtractorBase,
    ThumbnailGeneratorBase,
)

logger = get_logger(__name__)


def mongo_connection_string(doc_settings: DocumentDBSettings) -> str:
    """Build a MongoDB URI, with credentials only when both are set."""
    if doc_settings.username and doc_settings.password:
        return (
            f"mongodb://{doc_settings.username}:{doc_settings.password}"
            f"@{doc_settings.host}:{doc_settings.port}"
            f"/?authSource={doc_settings.auth_source}"
        )
    return f"mongodb://{doc_settings.host}:{doc_settings.port}"


class InfrastructureFactory:
    """Creates and caches infrastructure clients from settings.

    Each client is built on first use and reused for the process lifetime.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get the object store client for the configured bucket."""
        if "blob_storage" not in self._instances:
            blob_settings = self._settings.blob_storage
            self._instances["blob_storage"] = MinioBlobStorage(
                endpoint=blob_settings.endpoint,
                access_key=blob_settings.access_key,
                secret_key=blob_settings.secret_key,
                bucket=blob_settings.bucket,
                secure=blob_settings.use_ssl,
                region=blob_settings.region,
                delivery=DeliveryMode(blob_settings.delivery),
                public_url=blob_settings.public_url,
                presigned_expiry_seconds=blob_settings.presigned_url_expiry_seconds,
                multipart_threshold_bytes=blob_settings.multipart_threshold_bytes,
                part_size_bytes=blob_settings.part_size_bytes,
                max_concurrent_parts=blob_settings.max_concurrent_parts,
                upload_timeout_seconds=blob_settings.upload_timeout_seconds,
                media_route=f"{self._settings.server.api_prefix}/media",
            )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_document_db(self) -> DocumentDBBase:
        """Get the record store client."""
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=mongo_connection_string(doc_settings),
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_metadata_extractor(self) -> MetadataExtractorBase:
        """Get the ffprobe-backed metadata extractor."""
        if "metadata_extractor" not in self._instances:
            processing = self._settings.processing
            self._instances["metadata_extractor"] = FFprobeMetadataExtractor(
                ffprobe_path=processing.ffprobe_path,
                timeout_seconds=processing.probe_timeout_seconds,
            )
        return cast("MetadataExtractorBase", self._instances["metadata_extractor"])

    def get_thumbnail_generator(self) -> ThumbnailGeneratorBase:
        """Get the ffmpeg-backed thumbnail generator."""
        if "thumbnail_generator" not in self._instances:
            processing = self._settings.processing
            self._instances["thumbnail_generator"] = FFmpegThumbnailGenerator(
                ffmpeg_path=processing.ffmpeg_path,
                width=processing.thumbnail_width,
                height=processing.thumbnail_height,
                timeout_seconds=processing.thumbnail_timeout_seconds,
                extractor=self.get_metadata_extractor(),
            )
        return cast("ThumbnailGeneratorBase", self._instances["thumbnail_generator"])

    async def close_all(self) -> None:
        """Close all client connections."""
        for name, instance in self._instances.items():
            if hasattr(instance, "close"):
                try:
                    close_result = instance.close()
                    if hasattr(close_result, "__await__"):
                        await close_result
                except Exception as e:
                    logger.warning(
                        "Error closing client",
                        extra={"client": name, "error": str(e)},
                    )

        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)

    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
