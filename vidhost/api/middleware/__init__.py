"""API middleware."""

from vidhost.api.middleware.error_handler import APIError, error_handler_middleware
from vidhost.api.middleware.logging import LoggingMiddleware

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "error_handler_middleware",
]
