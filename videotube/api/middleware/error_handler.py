"""Error handling middleware mapping domain errors to JSON responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from videotube.commons.telemetry.logger import get_logger
from videotube.domain.exceptions import (
    DomainException,
    IngestionError,
    RangeNotSatisfiableError,
    StreamError,
    ValidationError,
    VideoNotFoundError,
)

logger = get_logger(__name__)


class APIError(Exception):
    """Route-level error with an explicit status code."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: str | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message, sent as ``error``.
            status_code: HTTP status code.
            details: Optional extra detail, sent as ``details``.
        """
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


def _build_error_response(
    message: str,
    status_code: int,
    details: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an ``{error, details?}`` JSON body."""
    content: dict[str, str] = {"error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _handle_exception(  # noqa: PLR0911
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Translate an exception into the matching error response."""
    request_id = getattr(request.state, "request_id", "unknown")

    if isinstance(exc, APIError):
        logger.warning(
            f"API error: {exc.message}",
            extra={"status_code": exc.status_code, "request_id": request_id},
        )
        return _build_error_response(exc.message, exc.status_code, exc.details)

    if isinstance(exc, ValidationError):
        logger.warning(f"Validation error: {exc}", extra={"request_id": request_id})
        return _build_error_response(str(exc), status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, IngestionError):
        logger.error(
            f"Ingestion error at step {exc.step.value}: {exc}",
            extra={"video_id": exc.video_id, "request_id": request_id},
        )
        return _build_error_response(
            "Upload failed",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=str(exc),
        )

    if isinstance(exc, VideoNotFoundError):
        logger.warning(f"Video not found: {exc.video_id}")
        return _build_error_response("Video not found", status.HTTP_404_NOT_FOUND)

    if isinstance(exc, RangeNotSatisfiableError):
        logger.warning(
            f"Range not satisfiable: {exc.reason}",
            extra={"range": exc.header, "size": exc.size},
        )
        return _build_error_response(
            "Range Not Satisfiable",
            status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            details=exc.reason,
            headers={"Content-Range": f"bytes */{exc.size}"},
        )

    if isinstance(exc, StreamError):
        logger.error(f"Stream error: {exc}", extra={"key": exc.key})
        return _build_error_response(
            "Stream failed", status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, DomainException):
        logger.warning(f"Domain error: {exc}")
        return _build_error_response(str(exc), status.HTTP_400_BAD_REQUEST)

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}", extra={"request_id": request_id})
    return _build_error_response(
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Catch exceptions raised by routes and format them as JSON."""
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
