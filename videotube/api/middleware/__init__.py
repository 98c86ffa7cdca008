"""API middleware components."""

from videotube.api.middleware.error_handler import APIError, error_handler_middleware
from videotube.api.middleware.logging import LoggingMiddleware

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "error_handler_middleware",
]
