"""Unit tests for VideoCatalogService."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from videotube.application.services.catalog import VideoCatalogService
from videotube.commons.settings.models import Settings
from videotube.domain.exceptions import VideoNotFoundError
from videotube.domain.models import MediaAsset


def _document(video_id: str, **overrides) -> dict:
    asset = MediaAsset.create(
        video_id=video_id,
        title=f"Video {video_id}",
        description=None,
        duration_seconds=12.0,
        thumbnail_count=2,
    )
    document = asset.to_document()
    document.update(overrides)
    return document


@pytest.fixture
def mock_document_db():
    db = MagicMock()
    db.find = AsyncMock(return_value=[])
    db.find_one = AsyncMock(return_value=None)
    db.increment = AsyncMock(return_value=None)
    return db


@pytest.fixture
def mock_blob():
    blob = MagicMock()
    blob.resolve_url.side_effect = lambda key: f"http://cdn.example/{key}"
    return blob


@pytest.fixture
def service(mock_document_db, mock_blob):
    return VideoCatalogService(mock_document_db, mock_blob, Settings())


class TestListVideos:
    """Tests for listing."""

    async def test_empty(self, service):
        assert await service.list_videos() == []

    async def test_newest_first_without_limit(self, service, mock_document_db):
        await service.list_videos()

        args, kwargs = mock_document_db.find.call_args
        assert args[0] == "videos"
        assert args[1] == {}
        assert kwargs["limit"] == 0
        assert kwargs["sort"] == [("created_at", -1)]

    async def test_api_shape(self, service, mock_document_db):
        mock_document_db.find.return_value = [_document("aaa"), _document("bbb")]

        videos = await service.list_videos()

        assert [v["videoId"] for v in videos] == ["aaa", "bbb"]
        assert videos[0]["thumbnails"] == [
            "http://cdn.example/thumbnails/aaa/thumb_1.jpg",
            "http://cdn.example/thumbnails/aaa/thumb_2.jpg",
        ]
        assert videos[0]["durationSeconds"] == 12.0
        assert videos[0]["viewCount"] == 0

    async def test_naive_timestamps_become_utc(self, service, mock_document_db):
        naive = datetime(2024, 5, 1, 12, 0, 0)
        mock_document_db.find.return_value = [_document("aaa", created_at=naive)]

        videos = await service.list_videos()

        assert videos[0]["createdAt"] == "2024-05-01T12:00:00Z"


class TestGetAsset:
    """Tests for lookups that do not count a view."""

    async def test_found(self, service, mock_document_db):
        mock_document_db.find_one.return_value = _document("abc")

        asset = await service.get_asset("abc")

        assert asset.video_key == "videos/abc.mp4"
        mock_document_db.increment.assert_not_called()

    async def test_missing(self, service):
        with pytest.raises(VideoNotFoundError):
            await service.get_asset("missing")


class TestViewVideo:
    """Tests for the view counter."""

    async def test_increments_in_store(self, service, mock_document_db):
        mock_document_db.increment.return_value = _document("abc", view_count=5)

        body = await service.view_video("abc")

        mock_document_db.increment.assert_awaited_once_with(
            "videos", {"video_id": "abc"}, "view_count", 1
        )
        assert body["viewCount"] == 5
        assert body["videoId"] == "abc"
        assert len(body["thumbnails"]) == 2

    async def test_missing(self, service):
        with pytest.raises(VideoNotFoundError):
            await service.view_video("missing")

    async def test_created_at_is_preserved(self, service, mock_document_db):
        created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        mock_document_db.increment.return_value = _document(
            "abc", created_at=created, view_count=1
        )

        body = await service.view_video("abc")

        assert body["createdAt"].startswith("2024-01-02T03:04:05")
