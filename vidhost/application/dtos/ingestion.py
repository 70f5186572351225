"""DTOs for video ingestion operations."""

from pydantic import BaseModel, Field

from vidhost.domain.models import IngestionStep, VideoRecord


class IngestVideoCommand(BaseModel):
    """Metadata submitted alongside an uploaded video."""

    title: str = Field(description="Title of the video")
    creator: str = Field(description="Name of the uploading creator")
    base_url: str = Field(
        default="",
        description="Scheme and host of the request, used for proxy URLs",
    )


class IngestVideoResult(BaseModel):
    """Outcome of a successful ingestion."""

    record: VideoRecord = Field(description="Catalog entry that was written")
    step: IngestionStep = Field(
        description="Last pipeline state reached before cleanup"
    )
