"""Abstract base classes for media inspection and thumbnail generation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class VideoInfo:
    """Facts reported by probing a media file."""

    path: Path
    duration_seconds: float
    format_name: str
    width: int
    height: int
    codec: str
    has_audio: bool
    file_size_bytes: int


@dataclass
class GeneratedThumbnail:
    """A still frame written to local disk."""

    path: Path
    index: int
    timestamp: float
    width: int
    height: int


class MetadataExtractorBase(ABC):
    """Probes a media file without decoding it.

    Implementations should handle:
    - FFprobe
    """

    @abstractmethod
    async def extract(self, video_path: Path) -> VideoInfo:
        """Probe a media file.

        Args:
            video_path: Path to the file.

        Returns:
            Video metadata.

        Raises:
            ProbeError: If the file is unreadable, corrupt or unsupported.
        """


class ThumbnailGeneratorBase(ABC):
    """Extracts evenly spaced still frames from a video."""

    @abstractmethod
    async def generate(
        self,
        video_path: Path,
        output_dir: Path,
        count: int = 10,
        duration_seconds: float | None = None,
    ) -> list[GeneratedThumbnail]:
        """Write up to ``count`` frames as ``thumb_{n}.jpg`` into ``output_dir``.

        Args:
            video_path: Path to input video.
            output_dir: Directory to write frames to; created if absent.
            count: Number of frames to take.
            duration_seconds: Known duration; probed when omitted.

        Returns:
            Frames actually written, ordered by index.

        Raises:
            GenerationError: If extraction fails.
        """
