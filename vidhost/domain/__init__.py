"""Domain layer - catalog models, pipeline states and exceptions."""

from vidhost.domain.exceptions import (
    AuthenticationError,
    CatalogWriteError,
    ConfigurationError,
    DomainException,
    IngestionException,
    MediaNotFoundError,
    MissingInputError,
    ThumbnailDerivationError,
    UploadError,
    VideoNormalizationError,
)
from vidhost.domain.models import (
    IngestionStep,
    ThumbnailMode,
    UserRecord,
    VideoRecord,
    newest_first,
)

__all__ = [
    # Exceptions
    "DomainException",
    "MissingInputError",
    "IngestionException",
    "ThumbnailDerivationError",
    "VideoNormalizationError",
    "UploadError",
    "CatalogWriteError",
    "MediaNotFoundError",
    "AuthenticationError",
    "ConfigurationError",
    # Models
    "VideoRecord",
    "UserRecord",
    "newest_first",
    "IngestionStep",
    "ThumbnailMode",
]
