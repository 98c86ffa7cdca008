"""Application layer - use cases and orchestration.

This layer contains:
- Services: ingestion pipeline, catalog reads, range streaming
- DTOs: Data transfer objects for API boundaries
"""

from videotube.application.dtos import (
    IngestionProgress,
    ProcessingStep,
    UploadedVideo,
    UploadResponse,
    VideoDetailResponse,
    VideoListResponse,
)
from videotube.application.services import (
    RangeStreamResponder,
    StreamReply,
    VideoCatalogService,
    VideoIngestionService,
)

__all__ = [
    # DTOs
    "IngestionProgress",
    "ProcessingStep",
    "UploadedVideo",
    "UploadResponse",
    "VideoDetailResponse",
    "VideoListResponse",
    # Services
    "RangeStreamResponder",
    "StreamReply",
    "VideoCatalogService",
    "VideoIngestionService",
]
