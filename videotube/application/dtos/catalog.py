"""DTOs for listing and reading stored videos."""

from typing import Any

from pydantic import BaseModel, Field


class VideoListResponse(BaseModel):
    """All stored videos, newest first."""

    videos: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Video records with resolved thumbnail URLs",
    )


class VideoDetailResponse(BaseModel):
    """A single stored video."""

    video: dict[str, Any] = Field(
        description="Video record with resolved thumbnail URLs"
    )
