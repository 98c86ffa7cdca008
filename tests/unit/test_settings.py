"""Unit tests for settings models and loader."""

import json
from pathlib import Path

import pytest

from videotube.commons.settings.loader import (
    SettingsLoader,
    coerce_env_value,
    deep_merge,
    get_settings,
    reset_settings,
)
from videotube.commons.settings.models import (
    MIB,
    AppSettings,
    BlobStorageSettings,
    DocumentDBSettings,
    ProcessingSettings,
    ServerSettings,
    Settings,
    StreamingSettings,
    TelemetrySettings,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    import os

    for key in list(os.environ):
        if key.startswith("VIDEOTUBE__"):
            monkeypatch.delenv(key)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "videotube"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_default_values(self):
        settings = ServerSettings()
        assert settings.port == 3000
        assert settings.api_prefix == "/api"
        assert settings.cors_origins == ["*"]

    def test_port_validation(self):
        with pytest.raises(ValueError):
            ServerSettings(port=0)
        with pytest.raises(ValueError):
            ServerSettings(port=70000)


class TestBlobStorageSettings:
    """Tests for BlobStorageSettings model."""

    def test_default_values(self):
        settings = BlobStorageSettings()
        assert settings.provider == "minio"
        assert settings.endpoint == "localhost:9000"
        assert settings.bucket == "videotube"
        assert settings.delivery == "direct"
        assert settings.public_url is None
        assert settings.multipart_threshold_bytes == 100 * MIB
        assert settings.part_size_bytes == 100 * MIB

    def test_part_size_floor(self):
        with pytest.raises(ValueError):
            BlobStorageSettings(part_size_bytes=1 * MIB)

    def test_part_size_ceiling(self):
        with pytest.raises(ValueError):
            BlobStorageSettings(part_size_bytes=6 * 1024 * MIB)

    def test_invalid_delivery(self):
        with pytest.raises(ValueError):
            BlobStorageSettings(delivery="cdn")  # type: ignore[arg-type]


class TestProcessingSettings:
    """Tests for ProcessingSettings model."""

    def test_default_values(self):
        settings = ProcessingSettings()
        assert settings.thumbnail_count == 10
        assert settings.upload_dir == "uploads/videos"
        assert settings.thumbnail_dir == "thumbnails"

    def test_thumbnail_count_bounds(self):
        with pytest.raises(ValueError):
            ProcessingSettings(thumbnail_count=0)


class TestRootSettings:
    """Tests for root Settings model."""

    def test_default_sections(self):
        settings = Settings()
        assert isinstance(settings.app, AppSettings)
        assert isinstance(settings.server, ServerSettings)
        assert isinstance(settings.blob_storage, BlobStorageSettings)
        assert isinstance(settings.document_db, DocumentDBSettings)
        assert isinstance(settings.processing, ProcessingSettings)
        assert isinstance(settings.streaming, StreamingSettings)
        assert isinstance(settings.telemetry, TelemetrySettings)
        assert settings.document_db.collections.videos == "videos"


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def test_load_empty_config(self, tmp_path):
        settings = SettingsLoader(config_dir=tmp_path, environment="dev").load()
        assert settings.app.name == "videotube"

    def test_environment_file_overrides_base(self, tmp_path: Path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps(
                {
                    "server": {"port": 8080},
                    "blob_storage": {"bucket": "base", "delivery": "direct"},
                }
            )
        )
        (tmp_path / "appsettings.prod.json").write_text(
            json.dumps({"blob_storage": {"delivery": "signed"}})
        )

        settings = SettingsLoader(config_dir=tmp_path, environment="prod").load()

        assert settings.server.port == 8080
        assert settings.blob_storage.bucket == "base"
        assert settings.blob_storage.delivery == "signed"

    def test_env_vars_win(self, tmp_path, monkeypatch):
        (tmp_path / "appsettings.json").write_text(
            json.dumps({"processing": {"thumbnail_count": 4}})
        )
        monkeypatch.setenv("VIDEOTUBE__PROCESSING__THUMBNAIL_COUNT", "6")
        monkeypatch.setenv("VIDEOTUBE__BLOB_STORAGE__USE_SSL", "true")

        settings = SettingsLoader(config_dir=tmp_path, environment="dev").load()

        assert settings.processing.thumbnail_count == 6
        assert settings.blob_storage.use_ssl is True


class TestHelpers:
    """Tests for loader helpers."""

    def test_deep_merge(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 10, "e": 4}, "f": 5}

        assert deep_merge(base, override) == {
            "a": {"b": 10, "c": 2, "e": 4},
            "d": 3,
            "f": 5,
        }
        assert base == {"a": {"b": 1, "c": 2}, "d": 3}

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("False", False),
            ("42", 42),
            ("0.5", 0.5),
            ('["a", "b"]', ["a", "b"]),
            ("localhost:9000", "localhost:9000"),
        ],
    )
    def test_coerce_env_value(self, raw, expected):
        assert coerce_env_value(raw) == expected


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_cached(self, tmp_path):
        assert get_settings(config_dir=tmp_path) is get_settings(config_dir=tmp_path)

    def test_reload(self, tmp_path):
        first = get_settings(config_dir=tmp_path)
        assert get_settings(config_dir=tmp_path, reload=True) is not first

    def test_reset(self, tmp_path):
        first = get_settings(config_dir=tmp_path)
        reset_settings()
        assert get_settings(config_dir=tmp_path) is not first
