"""Data Transfer Objects for the application layer."""

from videotube.application.dtos.catalog import VideoDetailResponse, VideoListResponse
from videotube.application.dtos.ingestion import (
    IngestionProgress,
    UploadedVideo,
    UploadResponse,
)
from videotube.domain.models import ProcessingStep

__all__ = [
    # Ingestion DTOs
    "IngestionProgress",
    "ProcessingStep",
    "UploadedVideo",
    "UploadResponse",
    # Catalog DTOs
    "VideoListResponse",
    "VideoDetailResponse",
]
