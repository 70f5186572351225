"""Application services."""

from vidhost.application.services.ingestion import VideoIngestionService
from vidhost.application.services.library import LibraryService
from vidhost.application.services.staging import (
    StagedUpload,
    StagedUploads,
    UploadStaging,
)

__all__ = [
    "VideoIngestionService",
    "LibraryService",
    "UploadStaging",
    "StagedUpload",
    "StagedUploads",
]
