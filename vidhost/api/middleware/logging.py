"""Request logging middleware."""

import time
import uuid
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from vidhost.commons.telemetry.logger import get_logger, set_correlation_id

logger = get_logger(__name__)

UPLOAD_PATH = "/upload_video"


def _content_length(request: Request) -> int | None:
    value = request.headers.get("content-length")
    return int(value) if value and value.isdigit() else None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Adds request ID tracking and logs request/response details. The request
    ID doubles as the correlation id of every log line the request emits,
    including the ingestion steps of an upload. Uploads additionally log the
    size of the multipart body and the transfer rate.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        """Process request with logging.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            HTTP response.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        set_correlation_id(request_id)

        is_upload = request.method == "POST" and request.url.path == UPLOAD_PATH
        body_bytes = _content_length(request)

        start_time = time.perf_counter()
        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        if is_upload:
            logger.info(
                "Upload received",
                extra={
                    "request_id": request_id,
                    "body_bytes": body_bytes,
                    "content_type": request.headers.get("content-type"),
                },
            )

        response: Response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        completed: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }
        if is_upload and body_bytes and duration_ms > 0:
            completed["upload_kib_per_s"] = round(
                body_bytes / 1024 / (duration_ms / 1000), 1
            )
        logger.info("Request completed", extra=completed)

        response.headers["X-Request-ID"] = request_id
        return response
