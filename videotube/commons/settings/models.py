"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "videotube"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    api_prefix: str = "/api"
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    docs_enabled: bool = True


class BlobStorageSettings(BaseModel):
    """Object store settings (MinIO, S3, R2)."""

    provider: Literal["minio", "s3", "r2"] = "minio"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    bucket: str = "videotube"
    delivery: Literal["direct", "signed"] = "direct"
    public_url: str | None = None
    presigned_url_expiry_seconds: int = Field(default=3600, ge=1, le=604800)
    multipart_threshold_bytes: int = Field(
        default=100 * MIB, ge=5 * MIB, le=5 * 1024 * MIB
    )
    part_size_bytes: int = Field(default=100 * MIB, ge=5 * MIB, le=5 * 1024 * MIB)
    max_concurrent_parts: int = Field(default=4, ge=1, le=32)
    upload_timeout_seconds: float | None = 3600.0


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "videotube"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class ProcessingSettings(BaseModel):
    """Upload processing settings (temp dirs, ffmpeg, limits)."""

    upload_dir: str = "uploads/videos"
    thumbnail_dir: str = "thumbnails"
    thumbnail_count: int = Field(default=10, ge=1, le=100)
    thumbnail_width: int = Field(default=320, ge=16)
    thumbnail_height: int = Field(default=180, ge=16)
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    probe_timeout_seconds: float = 60.0
    thumbnail_timeout_seconds: float = 120.0
    max_upload_size_mb: int = 5120  # 5 GB


class StreamingSettings(BaseModel):
    """Range streaming settings."""

    chunk_size_bytes: int = Field(default=64 * 1024, ge=1024)


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    streaming: StreamingSettings = Field(default_factory=StreamingSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEOTUBE__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
