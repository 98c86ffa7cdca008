"""Video inspection and thumbnail services."""

from videotube.infrastructure.video.base import (
    GeneratedThumbnail,
    MetadataExtractorBase,
    ThumbnailGeneratorBase,
    VideoInfo,
)
from videotube.infrastructure.video.ffmpeg_extractor import FFprobeMetadataExtractor
from videotube.infrastructure.video.ffmpeg_thumbnails import (
    FFmpegThumbnailGenerator,
    thumbnail_timestamps,
)

__all__ = [
    # Base classes
    "MetadataExtractorBase",
    "ThumbnailGeneratorBase",
    "VideoInfo",
    "GeneratedThumbnail",
    # Implementations
    "FFprobeMetadataExtractor",
    "FFmpegThumbnailGenerator",
    "thumbnail_timestamps",
]
