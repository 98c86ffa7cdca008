"""Domain exceptions for the video ingestion and streaming system."""

from videotube.domain.models.processing import ProcessingStep


class DomainException(Exception):
    """Base exception for domain errors."""


# =============================================================================
# Ingestion pipeline
# =============================================================================


class IngestionError(DomainException):
    """A failed ingestion run, tagged with the step that failed."""

    def __init__(
        self,
        message: str,
        step: ProcessingStep = ProcessingStep.FAILED,
        video_id: str | None = None,
    ) -> None:
        self.step = step
        self.video_id = video_id
        super().__init__(message)


class ValidationError(IngestionError):
    """Bad or missing input; raised before any processing happens."""

    def __init__(self, message: str, video_id: str | None = None) -> None:
        super().__init__(message, ProcessingStep.VALIDATING, video_id)


class DuplicateVideoError(ValidationError):
    """A record already exists for the derived video ID."""

    def __init__(self, video_id: str) -> None:
        super().__init__(f"Video ID already exists: {video_id}", video_id)


class ProbeError(IngestionError):
    """The media file could not be probed (unreadable, corrupt, unsupported)."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not probe {path}: {reason}", ProcessingStep.PROBING)


class GenerationError(IngestionError):
    """Thumbnail extraction failed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(
            f"Thumbnail generation failed for {path}: {reason}",
            ProcessingStep.GENERATING_THUMBNAILS,
        )


class UploadError(IngestionError):
    """The object store rejected or failed an upload.

    Objects stored before the failure are left in place.
    """

    def __init__(
        self,
        key: str,
        reason: str,
        step: ProcessingStep = ProcessingStep.UPLOADING_VIDEO,
    ) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Upload of {key} failed: {reason}", step)


class PersistenceError(IngestionError):
    """The record store failed at the commit point."""

    def __init__(self, video_id: str, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Could not save record for {video_id}: {reason}",
            ProcessingStep.PERSISTING,
            video_id,
        )


# =============================================================================
# Lookup and streaming
# =============================================================================


class VideoNotFoundError(DomainException):
    """Raised when a requested video record or its object does not exist."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class RangeNotSatisfiableError(DomainException):
    """The Range header is malformed or outside the object."""

    def __init__(self, header: str, size: int, reason: str) -> None:
        self.header = header
        self.size = size
        self.reason = reason
        super().__init__(f"Invalid range '{header}' for {size} bytes: {reason}")


class StreamError(DomainException):
    """The object store became unreachable while serving a stream."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Streaming {key} failed: {reason}")
