"""Unit tests for infrastructure factory."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from videotube.commons.infrastructure.blob import DeliveryMode, MinioBlobStorage
from videotube.commons.infrastructure.documentdb import MongoDBDocumentDB
from videotube.commons.settings.models import (
    BlobStorageSettings,
    DocumentDBSettings,
    ProcessingSettings,
    Settings,
)
from videotube.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    mongo_connection_string,
    reset_factory,
)
from videotube.infrastructure.video import (
    FFmpegThumbnailGenerator,
    FFprobeMetadataExtractor,
)


@pytest.fixture(autouse=True)
def reset_factory_before_each():
    """Reset factory singleton before each test."""
    reset_factory()
    yield
    reset_factory()


@pytest.fixture
def settings():
    return Settings(
        blob_storage=BlobStorageSettings(
            endpoint="minio:9000",
            access_key="admin",
            secret_key="secret",
            bucket="test-bucket",
            delivery="signed",
        ),
        document_db=DocumentDBSettings(host="mongo", port=27018, database="test_db"),
        processing=ProcessingSettings(ffprobe_path="/opt/ffprobe"),
    )


class TestMongoConnectionString:
    """Tests for connection string building."""

    def test_without_credentials(self):
        doc = DocumentDBSettings(host="mongo", port=27018)
        assert mongo_connection_string(doc) == "mongodb://mongo:27018"

    def test_with_credentials(self):
        doc = DocumentDBSettings(username="u", password="p", auth_source="admin")
        assert mongo_connection_string(doc) == (
            "mongodb://u:p@localhost:27017/?authSource=admin"
        )

    def test_username_alone_is_ignored(self):
        doc = DocumentDBSettings(username="u")
        assert mongo_connection_string(doc) == "mongodb://localhost:27017"


class TestInfrastructureFactory:
    """Tests for InfrastructureFactory."""

    def test_blob_storage_from_settings(self, settings):
        with patch(
            "videotube.commons.infrastructure.blob.minio_provider.Minio"
        ) as minio_class:
            factory = InfrastructureFactory(settings)
            blob = factory.get_blob_storage()

        assert isinstance(blob, MinioBlobStorage)
        assert blob.bucket == "test-bucket"
        assert blob.delivery is DeliveryMode.SIGNED
        assert blob.resolve_url("videos/a.mp4") == "/api/media/videos/a.mp4"
        assert minio_class.call_args.kwargs["endpoint"] == "minio:9000"

    def test_instances_are_cached(self, settings):
        with patch("videotube.commons.infrastructure.blob.minio_provider.Minio"):
            factory = InfrastructureFactory(settings)
            assert factory.get_blob_storage() is factory.get_blob_storage()

    def test_document_db_from_settings(self, settings):
        with patch(
            "videotube.commons.infrastructure.documentdb.mongodb_provider."
            "AsyncIOMotorClient"
        ) as client_class:
            factory = InfrastructureFactory(settings)
            document_db = factory.get_document_db()

        assert isinstance(document_db, MongoDBDocumentDB)
        client_class.assert_called_once_with("mongodb://mongo:27018")

    def test_video_tools_share_extractor(self, settings):
        factory = InfrastructureFactory(settings)

        extractor = factory.get_metadata_extractor()
        generator = factory.get_thumbnail_generator()

        assert isinstance(extractor, FFprobeMetadataExtractor)
        assert isinstance(generator, FFmpegThumbnailGenerator)
        assert generator._extractor is extractor

    async def test_close_all(self, settings):
        factory = InfrastructureFactory(settings)
        closable = MagicMock()
        closable.close = AsyncMock()
        factory._instances["document_db"] = closable

        await factory.close_all()

        closable.close.assert_awaited_once()
        assert factory._instances == {}

    async def test_close_all_survives_errors(self, settings):
        factory = InfrastructureFactory(settings)
        broken = MagicMock()
        broken.close = MagicMock(side_effect=RuntimeError("boom"))
        factory._instances["broken"] = broken

        await factory.close_all()

        assert factory._instances == {}


class TestFactorySingleton:
    """Tests for get_factory and reset_factory."""

    def test_requires_settings_first(self):
        with pytest.raises(ValueError):
            get_factory()

    def test_singleton(self, settings):
        factory = get_factory(settings)
        assert get_factory() is factory

    def test_reset(self, settings):
        factory = get_factory(settings)
        reset_factory()
        assert get_factory(settings) is not factory
