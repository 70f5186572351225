"""Ingestion pipeline states."""

from enum import Enum


class IngestionStep(str, Enum):
    """States an upload moves through, in order.

    ``FAILED`` is reachable from any state; both terminal paths end in
    ``CLEANED_UP`` once staged files have been released.
    """

    RECEIVED = "received"
    STAGED = "staged"
    THUMBNAIL_READY = "thumbnail_ready"
    VIDEO_READY = "video_ready"
    THUMBNAIL_UPLOADED = "thumbnail_uploaded"
    VIDEO_UPLOADED = "video_uploaded"
    CATALOG_WRITTEN = "catalog_written"
    FAILED = "failed"
    CLEANED_UP = "cleaned_up"


class ThumbnailMode(str, Enum):
    """How a thumbnail is produced."""

    FROM_SUPPLIED_IMAGE = "from_supplied_image"
    FROM_VIDEO_FRAME = "from_video_frame"
