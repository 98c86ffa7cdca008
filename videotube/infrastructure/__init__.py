"""Infrastructure layer - external tool and service implementations."""

from videotube.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from videotube.infrastructure.video import (
    FFmpegThumbnailGenerator,
    FFprobeMetadataExtractor,
    GeneratedThumbnail,
    MetadataExtractorBase,
    ThumbnailGeneratorBase,
    VideoInfo,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
    # Video
    "MetadataExtractorBase",
    "ThumbnailGeneratorBase",
    "VideoInfo",
    "GeneratedThumbnail",
    "FFprobeMetadataExtractor",
    "FFmpegThumbnailGenerator",
]
