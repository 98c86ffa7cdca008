"""API route handlers."""

from videotube.api.openapi.routes import health, stream, upload, videos

__all__ = [
    "health",
    "stream",
    "upload",
    "videos",
]
