"""Application services for ingesting, listing and streaming videos."""

from videotube.application.services.catalog import VideoCatalogService
from videotube.application.services.ingestion import VideoIngestionService
from videotube.application.services.streaming import RangeStreamResponder, StreamReply

__all__ = [
    "RangeStreamResponder",
    "StreamReply",
    "VideoCatalogService",
    "VideoIngestionService",
]
