"""DTOs for video upload and ingestion."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from videotube.domain.models import ProcessingStep


class IngestionProgress(BaseModel):
    """Progress information for an ongoing ingestion run."""

    video_id: str = Field(description="Per-upload video ID")
    current_step: ProcessingStep = Field(description="Current processing step")
    step_progress: float = Field(
        ge=0.0,
        le=1.0,
        description="Progress within current step (0.0 to 1.0)",
    )
    overall_progress: float = Field(
        ge=0.0,
        le=1.0,
        description="Overall ingestion progress (0.0 to 1.0)",
    )
    message: str = Field(description="Human-readable progress message")
    started_at: datetime = Field(description="When ingestion started")


class UploadedVideo(BaseModel):
    """Summary of a freshly ingested video."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Internal record ID")
    video_id: str = Field(description="Per-upload video ID")
    title: str = Field(description="Video title")
    duration: float = Field(description="Duration in seconds")


class UploadResponse(BaseModel):
    """Response body of a successful upload."""

    success: bool = True
    video: UploadedVideo
