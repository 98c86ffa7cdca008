"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends

from videotube.application.services import (
    RangeStreamResponder,
    VideoCatalogService,
    VideoIngestionService,
)
from videotube.commons.settings.loader import get_settings as _load_settings
from videotube.commons.settings.models import Settings
from videotube.commons.telemetry import get_logger
from videotube.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

logger = get_logger(__name__)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get the infrastructure factory singleton."""
    return get_factory(settings)


def get_ingestion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoIngestionService:
    """Get video ingestion service with all dependencies."""
    return VideoIngestionService(
        metadata_extractor=factory.get_metadata_extractor(),
        thumbnail_generator=factory.get_thumbnail_generator(),
        blob_storage=factory.get_blob_storage(),
        document_db=factory.get_document_db(),
        settings=settings,
    )


def get_catalog_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> VideoCatalogService:
    """Get the read-side catalog service."""
    return VideoCatalogService(
        document_db=factory.get_document_db(),
        blob_storage=factory.get_blob_storage(),
        settings=settings,
    )


def get_stream_responder(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RangeStreamResponder:
    """Get the byte-range stream responder."""
    return RangeStreamResponder(
        blob_storage=factory.get_blob_storage(),
        chunk_size=settings.streaming.chunk_size_bytes,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
IngestionServiceDep = Annotated[VideoIngestionService, Depends(get_ingestion_service)]
CatalogServiceDep = Annotated[VideoCatalogService, Depends(get_catalog_service)]
StreamResponderDep = Annotated[RangeStreamResponder, Depends(get_stream_responder)]


async def init_services(settings: Settings) -> None:
    """Prepare storage, indexes and local directories on startup.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    processing = settings.processing
    for directory in (processing.upload_dir, processing.thumbnail_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)

    await factory.get_blob_storage().ensure_bucket()

    index_name = await factory.get_document_db().create_index(
        settings.document_db.collections.videos,
        [("video_id", 1)],
        unique=True,
        name="video_id_unique",
    )
    logger.info("Services initialized", extra={"index": index_name})


async def shutdown_services() -> None:
    """Shutdown all infrastructure services."""
    try:
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        reset_factory()
        get_settings.cache_clear()
