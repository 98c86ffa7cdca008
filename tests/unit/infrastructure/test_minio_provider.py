"""Unit tests for the MinIO object store provider."""

import json
import time
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from minio.error import S3Error

from videotube.commons.infrastructure.blob import (
    BlobNotFoundError,
    DeliveryMode,
    MinioBlobStorage,
    plan_upload,
    public_read_policy,
)
from videotube.domain.exceptions import UploadError
from videotube.domain.value_objects import ByteRange

MIB = 1024 * 1024


class FakeS3Error(S3Error):
    """S3Error carrying only an error code."""

    def __init__(self, code: str) -> None:
        Exception.__init__(self, code)
        self._fake_code = code

    @property
    def code(self):
        return self._fake_code


def _stat_result(size=4, content_type="video/mp4"):
    stat = MagicMock()
    stat.size = size
    stat.content_type = content_type
    stat.last_modified = datetime(2024, 1, 1, tzinfo=UTC)
    stat.etag = "etag-1"
    return stat


@pytest.fixture
def client():
    client = MagicMock()
    client.stat_object.return_value = _stat_result()
    return client


def _storage(client, **kwargs) -> MinioBlobStorage:
    params = {
        "endpoint": "localhost:9000",
        "access_key": "admin",
        "secret_key": "secret",
        "bucket": "videotube",
        "client": client,
    }
    params.update(kwargs)
    return MinioBlobStorage(**params)


class TestPlanUpload:
    """Tests for single-shot vs multipart planning."""

    def test_below_threshold_is_single_part(self):
        plan = plan_upload(10 * MIB, threshold_bytes=100 * MIB, part_size=100 * MIB)
        assert plan.multipart is False
        assert plan.part_count == 1
        assert plan.part_size == 10 * MIB

    def test_tiny_object_uses_minimum_part_size(self):
        plan = plan_upload(10, threshold_bytes=100 * MIB, part_size=100 * MIB)
        assert plan.part_size == 5 * MIB

    def test_at_threshold_is_multipart(self):
        plan = plan_upload(100 * MIB, threshold_bytes=100 * MIB, part_size=100 * MIB)
        assert plan.multipart is True
        assert plan.part_count == 1

    def test_part_count_rounds_up(self):
        plan = plan_upload(250 * MIB, threshold_bytes=100 * MIB, part_size=100 * MIB)
        assert plan.part_count == 3

    def test_rejects_negative_size(self):
        with pytest.raises(ValueError):
            plan_upload(-1, threshold_bytes=100 * MIB, part_size=100 * MIB)

    def test_rejects_small_part_size(self):
        with pytest.raises(ValueError):
            plan_upload(10 * MIB, threshold_bytes=MIB, part_size=MIB)

    def test_rejects_too_many_parts(self):
        with pytest.raises(ValueError):
            plan_upload(10001 * 5 * MIB, threshold_bytes=5 * MIB, part_size=5 * MIB)


class TestPut:
    """Tests for uploads."""

    async def test_small_bytes_single_request(self, client):
        storage = _storage(client)

        metadata = await storage.put(
            "thumbnails/a/thumb_1.jpg", b"data", content_type="image/jpeg"
        )

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["bucket_name"] == "videotube"
        assert kwargs["object_name"] == "thumbnails/a/thumb_1.jpg"
        assert kwargs["length"] == 4
        assert kwargs["content_type"] == "image/jpeg"
        assert kwargs["part_size"] == 5 * MIB
        assert kwargs["num_parallel_uploads"] == 1
        assert metadata.size_bytes == 4

    async def test_large_object_multipart(self, client):
        storage = _storage(
            client,
            multipart_threshold_bytes=16,
            part_size_bytes=5 * MIB,
            max_concurrent_parts=3,
        )

        await storage.put("videos/a.mp4", b"x" * 32, content_type="video/mp4")

        kwargs = client.put_object.call_args.kwargs
        assert kwargs["part_size"] == 5 * MIB
        assert kwargs["num_parallel_uploads"] == 3

    async def test_path_source(self, client, tmp_path):
        path = tmp_path / "a.mp4"
        path.write_bytes(b"video-bytes")
        storage = _storage(client)

        await storage.put("videos/a.mp4", path, content_type="video/mp4")

        assert client.put_object.call_args.kwargs["length"] == len(b"video-bytes")

    async def test_progress_reported_as_fraction(self, client):
        def fake_put_object(**kwargs):
            progress = kwargs["progress"]
            progress.set_meta(kwargs["object_name"], 100)
            progress.update(50)
            progress.update(50)

        client.put_object.side_effect = fake_put_object
        fractions: list[float] = []
        storage = _storage(client)

        await storage.put("videos/a.mp4", b"x" * 100, progress=fractions.append)

        assert fractions == [0.5, 1.0]

    async def test_store_error_becomes_upload_error(self, client):
        client.put_object.side_effect = FakeS3Error("AccessDenied")
        storage = _storage(client)

        with pytest.raises(UploadError) as exc_info:
            await storage.put("videos/a.mp4", b"x")

        assert exc_info.value.key == "videos/a.mp4"

    async def test_timeout_becomes_upload_error(self, client):
        client.put_object.side_effect = lambda **kwargs: time.sleep(0.5)
        storage = _storage(client, upload_timeout_seconds=0.01)

        with pytest.raises(UploadError) as exc_info:
            await storage.put("videos/a.mp4", b"x")

        assert "timed out" in exc_info.value.reason


class TestGet:
    """Tests for streaming reads."""

    async def test_reads_window_and_releases(self, client):
        response = MagicMock()
        response.read.side_effect = [b"ab", b"cd", b""]
        client.get_object.return_value = response
        storage = _storage(client)

        chunks = [
            chunk
            async for chunk in storage.get(
                "videos/a.mp4", ByteRange(start=10, end=13), chunk_size=2
            )
        ]

        assert chunks == [b"ab", b"cd"]
        kwargs = client.get_object.call_args.kwargs
        assert kwargs["offset"] == 10
        assert kwargs["length"] == 4
        response.close.assert_called_once()
        response.release_conn.assert_called_once()

    async def test_whole_object(self, client):
        response = MagicMock()
        response.read.side_effect = [b""]
        client.get_object.return_value = response
        storage = _storage(client)

        async for _ in storage.get("videos/a.mp4"):
            pass

        kwargs = client.get_object.call_args.kwargs
        assert kwargs["offset"] == 0
        assert kwargs["length"] == 0

    async def test_early_close_releases(self, client):
        response = MagicMock()
        response.read.side_effect = [b"ab", b"cd", b""]
        client.get_object.return_value = response
        storage = _storage(client)

        stream = storage.get("videos/a.mp4")
        assert await stream.__anext__() == b"ab"
        await stream.aclose()

        response.close.assert_called_once()
        response.release_conn.assert_called_once()

    async def test_missing_key(self, client):
        client.get_object.side_effect = FakeS3Error("NoSuchKey")
        storage = _storage(client)

        with pytest.raises(BlobNotFoundError):
            async for _ in storage.get("videos/missing.mp4"):
                pass


class TestStat:
    """Tests for stat and exists."""

    async def test_stat(self, client):
        client.stat_object.return_value = _stat_result(size=1234)
        storage = _storage(client)

        metadata = await storage.stat("videos/a.mp4")

        assert metadata.path == "videos/a.mp4"
        assert metadata.size_bytes == 1234
        assert metadata.content_type == "video/mp4"

    async def test_missing(self, client):
        client.stat_object.side_effect = FakeS3Error("NoSuchKey")
        storage = _storage(client)

        with pytest.raises(BlobNotFoundError):
            await storage.stat("videos/a.mp4")
        assert await storage.exists("videos/a.mp4") is False

    async def test_exists(self, client):
        assert await _storage(client).exists("videos/a.mp4") is True


class TestListBlobs:
    """Tests for prefix listing."""

    async def test_respects_max_results(self, client):
        objects = []
        for n in range(5):
            obj = MagicMock()
            obj.object_name = f"videos/{n}.mp4"
            obj.size = n
            obj.last_modified = None
            obj.etag = None
            objects.append(obj)
        client.list_objects.return_value = iter(objects)

        blobs = await _storage(client).list_blobs("videos/", max_results=3)

        assert [b.path for b in blobs] == [
            "videos/0.mp4",
            "videos/1.mp4",
            "videos/2.mp4",
        ]
        kwargs = client.list_objects.call_args.kwargs
        assert kwargs["prefix"] == "videos/"
        assert kwargs["recursive"] is True


class TestUrls:
    """Tests for client-facing URLs."""

    def test_direct_default_public_url(self, client):
        storage = _storage(client)
        assert (
            storage.resolve_url("videos/a.mp4")
            == "http://localhost:9000/videotube/videos/a.mp4"
        )

    def test_direct_custom_public_url(self, client):
        storage = _storage(client, public_url="https://cdn.example.com/", secure=True)
        url = storage.resolve_url("videos/a.mp4")
        assert url == "https://cdn.example.com/videos/a.mp4"

    def test_signed_mode_uses_media_route(self, client):
        storage = _storage(client, delivery=DeliveryMode.SIGNED)
        assert storage.resolve_url("thumbnails/a/thumb_1.jpg") == (
            "/api/media/thumbnails/a/thumb_1.jpg"
        )

    async def test_presigned_url(self, client):
        client.presigned_get_object.return_value = "https://signed/videos/a.mp4?sig"
        storage = _storage(client, presigned_expiry_seconds=600)

        url = await storage.presigned_url("videos/a.mp4")

        assert url == "https://signed/videos/a.mp4?sig"
        kwargs = client.presigned_get_object.call_args.kwargs
        assert kwargs["expires"] == timedelta(seconds=600)


class TestEnsureBucket:
    """Tests for bucket setup."""

    async def test_creates_public_bucket_in_direct_mode(self, client):
        client.bucket_exists.return_value = False
        storage = _storage(client)

        assert await storage.ensure_bucket() is True

        client.make_bucket.assert_called_once_with(bucket_name="videotube")
        policy = json.loads(client.set_bucket_policy.call_args.kwargs["policy"])
        assert policy == public_read_policy("videotube")
        assert policy["Statement"][0]["Action"] == ["s3:GetObject"]

    async def test_existing_private_bucket_in_signed_mode(self, client):
        client.bucket_exists.return_value = True
        storage = _storage(client, delivery=DeliveryMode.SIGNED)

        assert await storage.ensure_bucket() is False

        client.make_bucket.assert_not_called()
        client.set_bucket_policy.assert_not_called()


class TestHealthCheck:
    """Tests for health checks."""

    async def test_healthy(self, client):
        status = await _storage(client).health_check()
        assert status.healthy is True

    async def test_unhealthy(self, client):
        client.bucket_exists.side_effect = ConnectionError("refused")
        status = await _storage(client).health_check()
        assert status.healthy is False
        assert "refused" in status.message
