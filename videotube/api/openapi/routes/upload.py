"""Video upload endpoint."""

import asyncio
from pathlib import Path
from typing import Annotated
from uuid import uuid4

from fastapi import APIRouter, File, Form, UploadFile, status

from videotube.api.dependencies import IngestionServiceDep, SettingsDep
from videotube.api.middleware.error_handler import APIError
from videotube.application.dtos.ingestion import UploadedVideo, UploadResponse
from videotube.commons.telemetry import get_logger

router = APIRouter()
logger = get_logger(__name__)

_SPOOL_CHUNK_BYTES = 1024 * 1024


async def spool_upload(upload: UploadFile, upload_dir: Path, max_bytes: int) -> Path:
    """Copy an incoming upload to ``upload_dir`` under a fresh random name.

    The file stem becomes the video ID, so every upload gets its own.

    Raises:
        APIError: 413 if the upload exceeds ``max_bytes``.
    """
    if upload.size is not None and upload.size > max_bytes:
        raise APIError("File too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

    upload_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix.lower()
    temp_path = upload_dir / f"{uuid4().hex}{suffix}"

    loop = asyncio.get_event_loop()
    written = 0
    try:
        with temp_path.open("wb") as handle:
            while chunk := await upload.read(_SPOOL_CHUNK_BYTES):
                written += len(chunk)
                if written > max_bytes:
                    raise APIError(
                        "File too large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
                    )
                await loop.run_in_executor(None, handle.write, chunk)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    logger.debug(
        "Upload spooled",
        extra={"path": str(temp_path), "size_bytes": written},
    )
    return temp_path


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload a video",
    description=(
        "Store a video with its thumbnails and create its record. "
        "Send multipart form data with `video`, `title` and optional "
        "`description`."
    ),
    responses={
        400: {"description": "Video and title required"},
        413: {"description": "File too large"},
        500: {"description": "Upload failed"},
    },
)
async def upload_video(
    ingestion: IngestionServiceDep,
    settings: SettingsDep,
    video: Annotated[UploadFile | None, File()] = None,
    title: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
) -> UploadResponse:
    """Run the ingestion pipeline for one uploaded file."""
    if video is None or not video.filename or not title or not title.strip():
        raise APIError("Video and title required")

    processing = settings.processing
    temp_path = await spool_upload(
        video,
        Path(processing.upload_dir),
        processing.max_upload_size_mb * 1024 * 1024,
    )

    asset = await ingestion.ingest(temp_path, title, description)

    return UploadResponse(
        video=UploadedVideo(
            id=asset.id,
            video_id=asset.video_id,
            title=asset.title,
            duration=asset.duration_seconds,
        )
    )
