"""Error handling middleware and exception handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from vidhost.commons.telemetry.logger import get_logger
from vidhost.domain.exceptions import (
    AuthenticationError,
    DomainException,
    IngestionException,
    MediaNotFoundError,
    MissingInputError,
)

logger = get_logger(__name__)

UPLOAD_FAILED_MESSAGE = "Video upload failed."
MISSING_INPUT_MESSAGE = "Missing video file, title, or creator name."


class APIError(Exception):
    """Error raised by a route with the exact body to send back.

    A ``str`` body is sent as plain text, anything else as JSON.
    """

    def __init__(
        self,
        body: str | dict[str, Any],
        status_code: int = status.HTTP_400_BAD_REQUEST,
        log_message: str | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            body: Response body.
            status_code: HTTP status code.
            log_message: Server-side detail, never sent to the client.
        """
        self.body = body
        self.status_code = status_code
        self.log_message = log_message
        super().__init__(log_message or str(body))


def _build_error_response(
    request: Request,
    body: str | dict[str, Any],
    status_code: int,
) -> Response:
    """Build an error response carrying the request id header.

    Args:
        request: HTTP request.
        body: Plain text or JSON body.
        status_code: HTTP status code.

    Returns:
        Error response.
    """
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-ID": request_id} if request_id else None

    if isinstance(body, str):
        return PlainTextResponse(body, status_code=status_code, headers=headers)
    return JSONResponse(content=body, status_code=status_code, headers=headers)


def _handle_exception(request: Request, exc: Exception) -> Response:
    """Handle exception and return appropriate error response.

    Args:
        request: HTTP request.
        exc: Exception to handle.

    Returns:
        Error response.
    """
    if isinstance(exc, APIError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"API error: {exc}",
            extra={"status_code": exc.status_code, "path": request.url.path},
        )
        return _build_error_response(request, exc.body, exc.status_code)

    if isinstance(exc, MissingInputError):
        logger.warning(f"Missing input: {exc}", extra={"missing": exc.missing})
        return _build_error_response(
            request, MISSING_INPUT_MESSAGE, status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, IngestionException):
        logger.error(
            f"Ingestion failed at {exc.stage}: {exc}",
            extra={"step": exc.step.value if exc.step else None},
        )
        return _build_error_response(
            request, UPLOAD_FAILED_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, MediaNotFoundError):
        logger.warning(f"Media not found: {exc.key}")
        is_thumbnail = request.url.path.startswith("/api/thumbnails")
        label = "Thumbnail" if is_thumbnail else "Video"
        return _build_error_response(
            request, f"{label} not found.", status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, AuthenticationError):
        return _build_error_response(
            request, {"message": str(exc)}, status.HTTP_401_UNAUTHORIZED
        )

    if isinstance(exc, DomainException):
        logger.warning(f"Domain error: {exc}")
        return _build_error_response(
            request, {"error": str(exc)}, status.HTTP_400_BAD_REQUEST
        )

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request,
        {"error": "An unexpected error occurred"},
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
