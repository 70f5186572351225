"""Video catalog domain model."""

from datetime import UTC, datetime
from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VideoRecord(BaseModel):
    """Catalog entry for one successfully ingested video.

    Records are immutable: they are written once, at the end of an
    ingestion, after both the thumbnail and the video are in blob storage.
    Field aliases are the wire/storage names (``videoUrl``, ``uploadedAt``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique key; backends may replace it with their own",
    )
    title: str = Field(min_length=1, description="Title supplied by the uploader")
    creator: str = Field(min_length=1, description="Creator name, not unique")
    video_url: str = Field(
        alias="videoUrl",
        min_length=1,
        description="Public blob URL or same-origin proxy path of the video",
    )
    thumbnail_url: str = Field(
        alias="thumbnailUrl",
        min_length=1,
        description="Public blob URL or same-origin proxy path of the thumbnail",
    )
    uploaded_at: datetime = Field(
        alias="uploadedAt",
        default_factory=lambda: datetime.now(UTC),
        description="Server-side creation time",
    )

    @field_validator("title", "creator")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("uploaded_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        # Drivers such as SQLite hand back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def to_document(self) -> dict[str, Any]:
        """Serialise with wire names, JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Self:
        """Build a record from a stored document, ignoring unknown keys."""
        known = {
            key: value
            for key, value in document.items()
            if key in cls.model_fields or key in _ALIASES
        }
        return cls.model_validate(known)


_ALIASES = frozenset({"videoUrl", "thumbnailUrl", "uploadedAt"})


def newest_first(records: list[VideoRecord]) -> list[VideoRecord]:
    """Order records by upload time, most recent first."""
    return sorted(records, key=lambda r: r.uploaded_at, reverse=True)
