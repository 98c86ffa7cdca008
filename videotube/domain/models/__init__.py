"""Domain models."""

from videotube.domain.models.media_asset import (
    THUMBNAIL_CONTENT_TYPE,
    VIDEO_CONTENT_TYPE,
    MediaAsset,
    thumbnail_object_key,
    thumbnail_prefix,
    video_object_key,
)
from videotube.domain.models.processing import ProcessingStep

__all__ = [
    "MediaAsset",
    "ProcessingStep",
    # Object key layout
    "video_object_key",
    "thumbnail_object_key",
    "thumbnail_prefix",
    "VIDEO_CONTENT_TYPE",
    "THUMBNAIL_CONTENT_TYPE",
]
