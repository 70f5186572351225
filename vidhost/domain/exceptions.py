"""Domain exceptions for the video hosting service."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vidhost.domain.models.ingestion import IngestionStep


class DomainException(Exception):
    """Base exception for domain errors."""


class MissingInputError(DomainException):
    """Raised when an upload lacks the video file, title or creator."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required upload fields: {', '.join(missing)}")


class IngestionException(DomainException):
    """Base for failures of a pipeline stage.

    ``step`` is the last state the ingestion reached before the failure;
    the orchestrator fills it in when the stage itself does not know it.
    """

    stage = "ingestion"

    def __init__(self, reason: str, step: IngestionStep | None = None) -> None:
        self.reason = reason
        self.step = step
        super().__init__(f"{self.stage} failed: {reason}")


class ThumbnailDerivationError(IngestionException):
    """Raised when the transcode step produces no usable thumbnail."""

    stage = "thumbnail derivation"


class VideoNormalizationError(IngestionException):
    """Raised when the uploaded video cannot be re-encoded."""

    stage = "video normalization"


class UploadError(IngestionException):
    """Raised when a blob put fails."""

    stage = "upload"

    def __init__(
        self,
        reason: str,
        key: str,
        step: IngestionStep | None = None,
    ) -> None:
        self.key = key
        super().__init__(f"{key}: {reason}", step)


class CatalogWriteError(IngestionException):
    """Raised when the catalog rejects or fails to persist a record."""

    stage = "catalog write"


class MediaNotFoundError(DomainException):
    """Raised when a proxied blob does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Media not found: {key}")


class AuthenticationError(DomainException):
    """Raised when submitted credentials match no account.

    The message is the same for unknown users and wrong passwords.
    """

    def __init__(self) -> None:
        super().__init__("Invalid username or password")


class ConfigurationError(DomainException):
    """Raised at startup when required settings are missing."""

    def __init__(self, section: str, missing: list[str]) -> None:
        self.section = section
        self.missing = missing
        super().__init__(
            f"Missing required {section} settings: {', '.join(missing)}"
        )
