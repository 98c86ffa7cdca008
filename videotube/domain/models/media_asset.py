"""Media asset domain model and its object-store key layout."""

from datetime import UTC, datetime
from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

VIDEO_CONTENT_TYPE = "video/mp4"
THUMBNAIL_CONTENT_TYPE = "image/jpeg"


def video_object_key(video_id: str) -> str:
    """Object key of the stored video: ``videos/{video_id}.mp4``."""
    return f"videos/{video_id}.mp4"


def thumbnail_prefix(video_id: str) -> str:
    """Key prefix shared by all thumbnails of one video."""
    return f"thumbnails/{video_id}/"


def thumbnail_object_key(video_id: str, index: int) -> str:
    """Object key of the 1-based ``index``-th thumbnail."""
    if index < 1:
        raise ValueError(f"Thumbnail index is 1-based, got {index}")
    return f"{thumbnail_prefix(video_id)}thumb_{index}.jpg"


class MediaAsset(BaseModel):
    """Persisted record of one successfully ingested video.

    Created once at the end of an ingestion run, after the video object and
    every thumbnail object are stored. The only later mutation is the view
    counter, which the record store increments atomically.

    Serialized for the HTTP API with camelCase aliases (``videoId``,
    ``durationSeconds``...) and stored in the document DB with the python
    field names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Internal UUID for this record",
    )
    video_id: str = Field(
        min_length=1,
        description="Per-upload identifier derived from the temp filename",
    )
    title: str = Field(description="Video title")
    description: str = Field(default="", description="Free-form description")
    stored_filename: str = Field(description="Filename of the stored video object")
    duration_seconds: float = Field(ge=0, description="Duration from probing")
    thumbnail_count: int = Field(
        default=0,
        ge=0,
        description="Number of thumbnail objects stored for this video",
    )
    view_count: int = Field(default=0, ge=0, description="Number of detail views")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the record was created",
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only titles."""
        if not v.strip():
            raise ValueError("title must not be empty")
        return v

    @classmethod
    def create(
        cls,
        *,
        video_id: str,
        title: str,
        description: str | None,
        duration_seconds: float,
        thumbnail_count: int,
    ) -> Self:
        """Build a fresh record for a completed ingestion run."""
        return cls(
            video_id=video_id,
            title=title,
            description=description or "",
            stored_filename=f"{video_id}.mp4",
            duration_seconds=duration_seconds,
            thumbnail_count=thumbnail_count,
        )

    @property
    def video_key(self) -> str:
        """Object key of the video."""
        return video_object_key(self.video_id)

    @property
    def thumbnail_keys(self) -> list[str]:
        """Object keys of all thumbnails, in index order."""
        return [
            thumbnail_object_key(self.video_id, n)
            for n in range(1, self.thumbnail_count + 1)
        ]

    def to_document(self) -> dict[str, Any]:
        """Shape used by the document DB."""
        return self.model_dump()

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Self:
        """Rebuild a record from a document DB row."""
        created_at = document.get("created_at")
        if isinstance(created_at, datetime) and created_at.tzinfo is None:
            # Mongo hands back naive UTC datetimes
            document = {**document, "created_at": created_at.replace(tzinfo=UTC)}
        return cls.model_validate(document)

    def to_api(self, thumbnails: list[str]) -> dict[str, Any]:
        """JSON body for the API: camelCase fields plus thumbnail URLs."""
        body = self.model_dump(mode="json", by_alias=True)
        body["thumbnails"] = thumbnails
        return body
