"""Video ingestion pipeline orchestration."""

import shutil
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from videotube.application.dtos.ingestion import IngestionProgress
from videotube.commons.infrastructure.blob import BlobStorageBase
from videotube.commons.infrastructure.documentdb import (
    DocumentDBBase,
    DuplicateDocumentError,
)
from videotube.commons.settings.models import Settings
from videotube.commons.telemetry import LogContext, get_logger
from videotube.domain.exceptions import (
    DuplicateVideoError,
    GenerationError,
    IngestionError,
    PersistenceError,
    UploadError,
    ValidationError,
)
from videotube.domain.models import (
    THUMBNAIL_CONTENT_TYPE,
    VIDEO_CONTENT_TYPE,
    MediaAsset,
    ProcessingStep,
    thumbnail_object_key,
    video_object_key,
)
from videotube.infrastructure.video import (
    GeneratedThumbnail,
    MetadataExtractorBase,
    ThumbnailGeneratorBase,
)

ProgressCallback = Callable[[IngestionProgress], None]

# Overall progress at the start of each step and the span it covers
_STEP_WINDOWS: dict[ProcessingStep, tuple[float, float]] = {
    ProcessingStep.VALIDATING: (0.0, 0.05),
    ProcessingStep.PROBING: (0.05, 0.05),
    ProcessingStep.GENERATING_THUMBNAILS: (0.1, 0.15),
    ProcessingStep.UPLOADING_VIDEO: (0.25, 0.6),
    ProcessingStep.UPLOADING_THUMBNAILS: (0.85, 0.1),
    ProcessingStep.PERSISTING: (0.95, 0.05),
    ProcessingStep.COMPLETED: (1.0, 0.0),
}


class VideoIngestionService:
    """Turns one uploaded temp file into stored objects plus a record.

    Steps run strictly in order: validate, probe, generate thumbnails, upload
    the video, upload thumbnails, persist the record. The record insert is
    the only commit point; objects uploaded before a later failure are left
    in the store. The temp file and the thumbnail directory are removed on
    every exit path.
    """

    def __init__(
        self,
        metadata_extractor: MetadataExtractorBase,
        thumbnail_generator: ThumbnailGeneratorBase,
        blob_storage: BlobStorageBase,
        document_db: DocumentDBBase,
        settings: Settings,
    ) -> None:
        """Initialize ingestion service with dependencies.

        Args:
            metadata_extractor: Probes uploaded files for duration.
            thumbnail_generator: Writes still frames to local disk.
            blob_storage: Object store for the video and thumbnails.
            document_db: Record store for media assets.
            settings: Application settings.
        """
        self._extractor = metadata_extractor
        self._thumbnails = thumbnail_generator
        self._blob = blob_storage
        self._document_db = document_db
        self._settings = settings
        self._logger = get_logger(__name__)

        self._videos_collection = settings.document_db.collections.videos
        self._thumbnail_root = Path(settings.processing.thumbnail_dir)
        self._thumbnail_count = settings.processing.thumbnail_count

    async def ingest(
        self,
        temp_file_path: Path,
        title: str,
        description: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> MediaAsset:
        """Run the full pipeline for one uploaded file.

        Args:
            temp_file_path: Uploaded file on local disk; its stem is the
                video ID.
            title: Required, non-blank title.
            description: Optional description.
            progress_callback: Optional callback for progress updates.

        Returns:
            The persisted media asset.

        Raises:
            IngestionError: A subclass naming the failed step. Raw errors
                from collaborators never escape.
        """
        started_at = datetime.now(UTC)
        video_id = temp_file_path.stem
        thumbnail_dir = self._thumbnail_root / video_id

        def report_progress(
            step: ProcessingStep, step_progress: float, message: str
        ) -> None:
            base, span = _STEP_WINDOWS.get(step, (0.0, 0.0))
            overall = round(min(1.0, base + span * step_progress), 4)
            self._logger.debug(
                "Progress update",
                extra={
                    "step": step.value,
                    "step_progress": round(step_progress, 3),
                    "overall_progress": round(overall, 3),
                    "progress_message": message,
                },
            )
            if progress_callback:
                progress_callback(
                    IngestionProgress(
                        video_id=video_id,
                        current_step=step,
                        step_progress=min(1.0, max(0.0, step_progress)),
                        overall_progress=overall,
                        message=message,
                        started_at=started_at,
                    )
                )

        with LogContext(video_id=video_id):
            self._logger.info(
                "Starting video ingestion",
                extra={"title": title, "path": str(temp_file_path)},
            )
            try:
                report_progress(ProcessingStep.VALIDATING, 0.0, "Validating upload")
                await self._validate(temp_file_path, video_id, title)

                report_progress(ProcessingStep.PROBING, 0.0, "Reading metadata")
                info = await self._extractor.extract(temp_file_path)
                self._logger.info(
                    "Metadata extracted",
                    extra={"duration_seconds": info.duration_seconds},
                )

                report_progress(
                    ProcessingStep.GENERATING_THUMBNAILS, 0.0, "Generating thumbnails"
                )
                thumbnails = await self._generate_thumbnails(
                    temp_file_path, thumbnail_dir, info.duration_seconds
                )

                video_key = video_object_key(video_id)
                report_progress(
                    ProcessingStep.UPLOADING_VIDEO, 0.0, f"Uploading {video_key}"
                )
                await self._upload(
                    video_key,
                    temp_file_path,
                    VIDEO_CONTENT_TYPE,
                    ProcessingStep.UPLOADING_VIDEO,
                    lambda fraction: report_progress(
                        ProcessingStep.UPLOADING_VIDEO,
                        fraction,
                        f"Uploading {video_key}: {int(fraction * 100)}%",
                    ),
                )

                for position, thumbnail in enumerate(thumbnails, start=1):
                    await self._upload(
                        thumbnail_object_key(video_id, position),
                        thumbnail.path,
                        THUMBNAIL_CONTENT_TYPE,
                        ProcessingStep.UPLOADING_THUMBNAILS,
                    )
                    report_progress(
                        ProcessingStep.UPLOADING_THUMBNAILS,
                        position / len(thumbnails),
                        f"Uploaded thumbnail {position}/{len(thumbnails)}",
                    )

                report_progress(ProcessingStep.PERSISTING, 0.0, "Saving record")
                asset = MediaAsset.create(
                    video_id=video_id,
                    title=title.strip(),
                    description=description,
                    duration_seconds=info.duration_seconds,
                    thumbnail_count=len(thumbnails),
                )
                await self._persist(asset)

                report_progress(ProcessingStep.COMPLETED, 1.0, "Ingestion complete")
                self._logger.info(
                    "Video ingestion completed",
                    extra={
                        "record_id": asset.id,
                        "thumbnail_count": asset.thumbnail_count,
                        "duration_ms": round(
                            (datetime.now(UTC) - started_at).total_seconds() * 1000
                        ),
                    },
                )
                return asset

            except IngestionError as e:
                e.video_id = e.video_id or video_id
                self._logger.error(
                    "Ingestion failed",
                    extra={"step": e.step.value, "error": str(e)},
                )
                raise

            except Exception as e:
                self._logger.exception(
                    "Ingestion failed with unexpected error",
                    extra={"error": str(e)},
                )
                raise IngestionError(
                    f"Ingestion failed: {e}", ProcessingStep.FAILED, video_id
                ) from e

            finally:
                self._release(temp_file_path, thumbnail_dir)

    async def _validate(self, temp_file_path: Path, video_id: str, title: str) -> None:
        if not title or not title.strip():
            raise ValidationError("Video and title required", video_id)
        if not temp_file_path.is_file():
            raise ValidationError(
                f"Uploaded file not found: {temp_file_path}", video_id
            )
        existing = await self._document_db.find_one(
            self._videos_collection, {"video_id": video_id}
        )
        if existing is not None:
            raise DuplicateVideoError(video_id)

    async def _generate_thumbnails(
        self, video_path: Path, output_dir: Path, duration_seconds: float
    ) -> list[GeneratedThumbnail]:
        thumbnails = await self._thumbnails.generate(
            video_path,
            output_dir,
            count=self._thumbnail_count,
            duration_seconds=duration_seconds,
        )
        if not thumbnails:
            raise GenerationError(str(video_path), "no frames could be extracted")
        if len(thumbnails) < self._thumbnail_count:
            self._logger.warning(
                "Fewer thumbnails than requested",
                extra={
                    "requested": self._thumbnail_count,
                    "generated": len(thumbnails),
                },
            )
        return sorted(thumbnails, key=lambda t: t.index)

    async def _upload(
        self,
        key: str,
        path: Path,
        content_type: str,
        step: ProcessingStep,
        progress: Callable[[float], None] | None = None,
    ) -> None:
        try:
            await self._blob.put(
                key,
                path,
                size_hint=path.stat().st_size,
                content_type=content_type,
                progress=progress,
            )
        except UploadError as e:
            if e.step is step:
                raise
            raise UploadError(e.key, e.reason, step) from e
        except Exception as e:
            raise UploadError(key, str(e), step) from e
        self._logger.debug("Uploaded object", extra={"key": key})

    async def _persist(self, asset: MediaAsset) -> None:
        try:
            await self._document_db.insert(self._videos_collection, asset.to_document())
        except DuplicateDocumentError as e:
            raise DuplicateVideoError(asset.video_id) from e
        except Exception as e:
            raise PersistenceError(asset.video_id, str(e)) from e

    def _release(self, temp_file_path: Path, thumbnail_dir: Path) -> None:
        try:
            temp_file_path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning(
                "Could not remove temp file",
                extra={"path": str(temp_file_path), "error": str(e)},
            )
        if thumbnail_dir.exists():
            shutil.rmtree(thumbnail_dir, ignore_errors=True)
        self._logger.debug("Temporary files released")
