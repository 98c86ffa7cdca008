"""Domain layer - records, value objects and errors."""

from videotube.domain.exceptions import (
    DomainException,
    DuplicateVideoError,
    GenerationError,
    IngestionError,
    PersistenceError,
    ProbeError,
    RangeNotSatisfiableError,
    StreamError,
    UploadError,
    ValidationError,
    VideoNotFoundError,
)
from videotube.domain.models import (
    MediaAsset,
    ProcessingStep,
    thumbnail_object_key,
    thumbnail_prefix,
    video_object_key,
)
from videotube.domain.value_objects import ByteRange

__all__ = [
    # Exceptions
    "DomainException",
    "IngestionError",
    "ValidationError",
    "DuplicateVideoError",
    "ProbeError",
    "GenerationError",
    "UploadError",
    "PersistenceError",
    "VideoNotFoundError",
    "RangeNotSatisfiableError",
    "StreamError",
    # Models
    "MediaAsset",
    "ProcessingStep",
    "video_object_key",
    "thumbnail_object_key",
    "thumbnail_prefix",
    # Value Objects
    "ByteRange",
]
