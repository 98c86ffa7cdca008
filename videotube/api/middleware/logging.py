"""Request logging middleware."""

import time
import uuid
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from videotube.commons.telemetry.logger import get_logger, set_correlation_id

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _request_fields(request: Request) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }
    if "range" in request.headers:
        fields["range"] = request.headers["range"]
    return fields


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request and tags it with a request ID.

    The ID comes from ``X-Request-ID`` when the client sends one. It becomes
    the log correlation ID and is echoed back on the response. Streamed
    bodies are logged when the headers go out, not when the last byte does.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        set_correlation_id(request_id)

        fields = _request_fields(request)
        logger.info("Request started", extra=fields)
        started = time.perf_counter()

        response = await call_next(request)

        completed = {
            **fields,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        if "content-range" in response.headers:
            completed["content_range"] = response.headers["content-range"]
        logger.info("Request completed", extra=completed)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
