"""Unit tests for the orphan report script."""

from unittest.mock import AsyncMock, MagicMock

from scripts.find_orphans import build_report, find_orphans, video_id_from_key
from videotube.commons.infrastructure.blob import BlobMetadata
from videotube.commons.settings.models import Settings


class TestVideoIdFromKey:
    """Tests for key parsing."""

    def test_video_key(self):
        assert video_id_from_key("videos/a1b2.mp4") == "a1b2"

    def test_thumbnail_key(self):
        assert video_id_from_key("thumbnails/a1b2/thumb_3.jpg") == "a1b2"

    def test_unrelated_keys(self):
        assert video_id_from_key("videos/.mp4") is None
        assert video_id_from_key("thumbnails/") is None
        assert video_id_from_key("other/a1b2.mp4") is None


class TestBuildReport:
    """Tests for matching objects against records."""

    def test_objects_without_record(self):
        keys = [
            "videos/kept.mp4",
            "thumbnails/kept/thumb_1.jpg",
            "videos/lost.mp4",
            "thumbnails/lost/thumb_1.jpg",
            "thumbnails/lost/thumb_2.jpg",
        ]

        report = build_report(keys, {"kept"})

        assert list(report.objects_without_record) == ["lost"]
        assert len(report.objects_without_record["lost"]) == 3
        assert report.records_without_video == []

    def test_records_without_video(self):
        report = build_report(["thumbnails/gone/thumb_1.jpg"], {"gone", "also"})

        assert report.records_without_video == ["also", "gone"]
        assert report.objects_without_record == {}


class TestFindOrphans:
    """Tests for scanning both stores."""

    async def test_scans_both_prefixes(self):
        def _blob(path):
            return BlobMetadata(
                path=path,
                size_bytes=1,
                content_type="application/octet-stream",
                created_at=None,
                etag="",
            )

        blob = MagicMock()
        blob.list_blobs = AsyncMock(
            side_effect=[
                [_blob("videos/a.mp4"), _blob("videos/b.mp4")],
                [_blob("thumbnails/b/thumb_1.jpg")],
            ]
        )
        document_db = MagicMock()
        document_db.find = AsyncMock(return_value=[{"id": "1", "video_id": "a"}])
        factory = MagicMock()
        factory.get_blob_storage.return_value = blob
        factory.get_document_db.return_value = document_db
        factory.settings = Settings()

        report = await find_orphans(factory, limit=50)

        assert set(report.objects_without_record) == {"b"}
        prefixes = [c.kwargs["prefix"] for c in blob.list_blobs.call_args_list]
        assert prefixes == ["videos/", "thumbnails/"]
        document_db.find.assert_awaited_once_with("videos", {}, limit=0)
