"""Domain models."""

from vidhost.domain.models.ingestion import IngestionStep, ThumbnailMode
from vidhost.domain.models.user import UserRecord
from vidhost.domain.models.video import VideoRecord, newest_first

__all__ = [
    # Catalog
    "VideoRecord",
    "UserRecord",
    "newest_first",
    # Pipeline
    "IngestionStep",
    "ThumbnailMode",
]
