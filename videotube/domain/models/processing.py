"""Pipeline step identifiers shared by errors and progress reports."""

from enum import Enum


class ProcessingStep(str, Enum):
    """Individual steps in the ingestion pipeline."""

    VALIDATING = "validating"
    PROBING = "probing"
    GENERATING_THUMBNAILS = "generating_thumbnails"
    UPLOADING_VIDEO = "uploading_video"
    UPLOADING_THUMBNAILS = "uploading_thumbnails"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"
