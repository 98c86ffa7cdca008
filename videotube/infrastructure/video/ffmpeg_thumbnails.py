"""FFmpeg implementation of thumbnail generation."""

import asyncio
import subprocess
from pathlib import Path

from PIL import Image

from videotube.commons.telemetry import get_logger, timed
from videotube.domain.exceptions import GenerationError, ProbeError
from videotube.infrastructure.video.base import (
    GeneratedThumbnail,
    MetadataExtractorBase,
    ThumbnailGeneratorBase,
)
from videotube.infrastructure.video.ffmpeg_extractor import FFprobeMetadataExtractor

logger = get_logger(__name__)


def thumbnail_timestamps(duration_seconds: float, count: int) -> list[float]:
    """Evenly spaced capture points that avoid the first and last instant.

    Frame ``i`` (1-based) sits at ``duration * i / (count + 1)``.

    Examples:
        >>> thumbnail_timestamps(110.0, 10)[:3]
        [10.0, 20.0, 30.0]
    """
    return [duration_seconds * i / (count + 1) for i in range(1, count + 1)]


class FFmpegThumbnailGenerator(ThumbnailGeneratorBase):
    """Grabs single frames with ffmpeg and scales them to a fixed size.

    Requires ffmpeg to be installed and available in PATH.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        width: int = 320,
        height: int = 180,
        timeout_seconds: float | None = 120.0,
        extractor: MetadataExtractorBase | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            width: Output frame width.
            height: Output frame height.
            timeout_seconds: Upper bound for each frame grab.
            extractor: Used to learn the duration when the caller doesn't.
        """
        self._ffmpeg = ffmpeg_path
        self._width = width
        self._height = height
        self._timeout = timeout_seconds
        self._extractor = extractor or FFprobeMetadataExtractor()

    @timed
    async def generate(
        self,
        video_path: Path,
        output_dir: Path,
        count: int = 10,
        duration_seconds: float | None = None,
    ) -> list[GeneratedThumbnail]:
        """Write up to ``count`` frames; frames ffmpeg could not produce are skipped."""
        if count < 1:
            raise GenerationError(str(video_path), f"count must be >= 1, got {count}")

        if duration_seconds is None:
            try:
                info = await self._extractor.extract(video_path)
            except ProbeError as e:
                raise GenerationError(str(video_path), e.reason) from e
            duration_seconds = info.duration_seconds

        output_dir.mkdir(parents=True, exist_ok=True)

        thumbnails: list[GeneratedThumbnail] = []
        for index, timestamp in enumerate(
            thumbnail_timestamps(duration_seconds, count), start=1
        ):
            output_path = output_dir / f"thumb_{index}.jpg"
            await self._grab_frame(video_path, timestamp, output_path)

            if not output_path.is_file() or output_path.stat().st_size == 0:
                logger.debug(
                    "No frame written",
                    extra={"index": index, "timestamp": round(timestamp, 3)},
                )
                continue

            width, height = await self._dimensions(video_path, output_path)
            thumbnails.append(
                GeneratedThumbnail(
                    path=output_path,
                    index=index,
                    timestamp=timestamp,
                    width=width,
                    height=height,
                )
            )

        logger.info(
            "Thumbnails generated",
            extra={"requested": count, "generated": len(thumbnails)},
        )
        return thumbnails

    async def _grab_frame(
        self, video_path: Path, timestamp: float, output_path: Path
    ) -> None:
        cmd = [
            self._ffmpeg,
            "-ss",
            f"{timestamp:.3f}",
            "-i",
            str(video_path),
            "-frames:v",
            "1",
            "-s",
            f"{self._width}x{self._height}",
            "-q:v",
            "2",
            "-y",
            str(output_path),
        ]

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: subprocess.run(
                    cmd, capture_output=True, check=True, timeout=self._timeout
                ),
            )
        except subprocess.TimeoutExpired as e:
            raise GenerationError(
                str(video_path), f"frame at {timestamp:.3f}s timed out"
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            raise GenerationError(
                str(video_path), stderr[-500:] or f"exit status {e.returncode}"
            ) from e
        except OSError as e:
            raise GenerationError(str(video_path), str(e)) from e

    async def _dimensions(self, video_path: Path, image_path: Path) -> tuple[int, int]:
        loop = asyncio.get_event_loop()

        def _read() -> tuple[int, int]:
            with Image.open(image_path) as img:
                return img.size

        try:
            return await loop.run_in_executor(None, _read)
        except OSError as e:
            raise GenerationError(
                str(video_path), f"unreadable frame {image_path.name}: {e}"
            ) from e
