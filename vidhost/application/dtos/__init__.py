"""Data transfer objects for application layer."""

from vidhost.application.dtos.auth import LoginRequest, LoginResponse
from vidhost.application.dtos.ingestion import IngestVideoCommand, IngestVideoResult

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    # Ingestion
    "IngestVideoCommand",
    "IngestVideoResult",
]
