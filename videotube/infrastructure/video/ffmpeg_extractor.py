"""FFprobe implementation of metadata extraction."""

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Any

from videotube.commons.telemetry import get_logger, timed
from videotube.domain.exceptions import ProbeError
from videotube.infrastructure.video.base import MetadataExtractorBase, VideoInfo

logger = get_logger(__name__)


def _stderr_tail(error: subprocess.CalledProcessError, limit: int = 500) -> str:
    stderr = error.stderr or b""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr.strip()[-limit:] or f"exit status {error.returncode}"


class FFprobeMetadataExtractor(MetadataExtractorBase):
    """Reads container and stream facts with ffprobe.

    Requires ffprobe to be installed and available in PATH.
    """

    def __init__(
        self,
        ffprobe_path: str = "ffprobe",
        timeout_seconds: float | None = 60.0,
    ) -> None:
        """Initialize the extractor.

        Args:
            ffprobe_path: Path to ffprobe executable.
            timeout_seconds: Upper bound for one probe.
        """
        self._ffprobe = ffprobe_path
        self._timeout = timeout_seconds

    @timed
    async def extract(self, video_path: Path) -> VideoInfo:
        """Probe ``video_path`` and return its duration and stream facts."""
        if not video_path.is_file():
            raise ProbeError(str(video_path), "file does not exist")

        cmd = [
            self._ffprobe,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(video_path),
        ]

        loop = asyncio.get_event_loop()
        try:
            result = await loop.run_in_executor(
                None,
                lambda: subprocess.run(
                    cmd, capture_output=True, check=True, timeout=self._timeout
                ),
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeError(str(video_path), f"timed out after {e.timeout}s") from e
        except subprocess.CalledProcessError as e:
            raise ProbeError(str(video_path), _stderr_tail(e)) from e
        except OSError as e:
            raise ProbeError(str(video_path), str(e)) from e

        try:
            data = json.loads(result.stdout)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProbeError(str(video_path), "ffprobe output is not JSON") from e

        return self._parse(video_path, data)

    def _parse(self, video_path: Path, data: dict[str, Any]) -> VideoInfo:
        video_stream = None
        audio_stream = None
        for stream in data.get("streams", []):
            if stream.get("codec_type") == "video" and video_stream is None:
                video_stream = stream
            elif stream.get("codec_type") == "audio" and audio_stream is None:
                audio_stream = stream

        if not video_stream:
            raise ProbeError(str(video_path), "no video stream found")

        format_info = data.get("format", {})
        raw_duration = format_info.get("duration", video_stream.get("duration"))
        try:
            duration = float(raw_duration)
        except (TypeError, ValueError) as e:
            raise ProbeError(str(video_path), "duration is missing") from e
        if duration < 0:
            raise ProbeError(str(video_path), f"negative duration {duration}")

        info = VideoInfo(
            path=video_path,
            duration_seconds=duration,
            format_name=format_info.get("format_name", "unknown"),
            width=int(video_stream.get("width", 0)),
            height=int(video_stream.get("height", 0)),
            codec=video_stream.get("codec_name", "unknown"),
            has_audio=audio_stream is not None,
            file_size_bytes=int(format_info.get("size", 0)),
        )
        logger.debug(
            "Probed video",
            extra={
                "path": str(video_path),
                "duration_seconds": info.duration_seconds,
                "codec": info.codec,
            },
        )
        return info
