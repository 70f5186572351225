"""Video ingestion orchestration service."""

import secrets
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar
from uuid import uuid4

from vidhost.application.dtos.ingestion import IngestVideoCommand, IngestVideoResult
from vidhost.application.services.staging import (
    IncomingFile,
    StagedUploads,
    UploadStaging,
    is_present,
)
from vidhost.commons.infrastructure.blob.base import BlobStorageBase
from vidhost.commons.infrastructure.catalog.base import CatalogStoreBase
from vidhost.commons.settings.models import Settings
from vidhost.commons.telemetry import LogContext, get_logger
from vidhost.domain.exceptions import (
    CatalogWriteError,
    IngestionException,
    MissingInputError,
    UploadError,
)
from vidhost.domain.models import IngestionStep, ThumbnailMode, VideoRecord
from vidhost.infrastructure.media import (
    NormalizedVideo,
    ThumbnailDeriverBase,
    VideoNormalizerBase,
)

THUMBNAIL_CONTENT_TYPE = "image/png"

R = TypeVar("R")


def unique_name(prefix: str, extension: str) -> str:
    """File name made of a millisecond timestamp and a random suffix."""
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}.{extension}"


def missing_fields(
    command: IngestVideoCommand,
    video: IncomingFile | None,
) -> list[str]:
    """Names of required upload fields that are absent or blank."""
    missing = []
    if not is_present(video):
        missing.append("videoFile")
    if not command.title.strip():
        missing.append("videoTitle")
    if not command.creator.strip():
        missing.append("creatorName")
    return missing


@dataclass
class IngestionProgress:
    """State of one run: last step reached and blob keys already stored."""

    step: IngestionStep = IngestionStep.RECEIVED
    stored: list[str] = field(default_factory=list)


class VideoIngestionService:
    """Orchestrates the upload pipeline.

    Pipeline steps:
    1. Validate the request and stage the raw files
    2. Derive a PNG thumbnail (supplied image or a frame of the video)
    3. Normalize the video (re-encode or pass through)
    4. Put the thumbnail, then the video, into blob storage
    5. Insert the catalog record
    6. Release the staged files

    Blobs already stored are not rolled back when a later step fails; their
    keys are logged so they can be cleaned up by hand.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        catalog: CatalogStoreBase,
        thumbnail_deriver: ThumbnailDeriverBase,
        video_normalizer: VideoNormalizerBase,
        staging: UploadStaging,
        settings: Settings,
    ) -> None:
        """Initialize ingestion service with dependencies.

        Args:
            blob_storage: Blob storage for thumbnails and videos.
            catalog: Catalog the finished record is written to.
            thumbnail_deriver: Thumbnail transcode stage.
            video_normalizer: Video transcode stage.
            staging: Holding area for raw uploads.
            settings: Application settings.
        """
        self._blob = blob_storage
        self._catalog = catalog
        self._thumbnails = thumbnail_deriver
        self._normalizer = video_normalizer
        self._staging = staging
        self._settings = settings
        self._logger = get_logger(__name__)

        self._bucket = settings.blob_storage.bucket
        self._thumbnails_prefix = settings.blob_storage.thumbnails_prefix
        self._videos_prefix = settings.blob_storage.videos_prefix

    async def ingest(
        self,
        command: IngestVideoCommand,
        video: IncomingFile | None,
        thumbnail: IncomingFile | None = None,
    ) -> IngestVideoResult:
        """Run an upload through the whole pipeline.

        Args:
            command: Title, creator and request base URL.
            video: Uploaded video part.
            thumbnail: Optional custom thumbnail part.

        Returns:
            The written record and the final pipeline state.

        Raises:
            MissingInputError: If the video, title or creator is missing.
            IngestionException: If any later step fails.
        """
        missing = missing_fields(command, video)
        if missing or video is None:
            self._logger.warning(
                "Upload rejected, missing input", extra={"missing": missing}
            )
            raise MissingInputError(missing)

        with LogContext(ingestion_id=uuid4().hex[:12], creator=command.creator):
            progress = IngestionProgress()
            self._advance(progress, IngestionStep.RECEIVED)
            try:
                async with self._staging.stage(video, thumbnail) as staged:
                    self._advance(progress, IngestionStep.STAGED)
                    record = await self._process(command, staged, progress)
                    reached = progress.step
            except IngestionException as e:
                if e.step is None:
                    e.step = progress.step
                self._fail(e, progress)
                raise
            except Exception as e:
                self._logger.exception("Ingestion failed unexpectedly")
                wrapped = IngestionException(
                    str(e) or type(e).__name__, progress.step
                )
                self._fail(wrapped, progress)
                raise wrapped from e
            finally:
                self._advance(progress, IngestionStep.CLEANED_UP)

            self._logger.info(
                "Video ingested",
                extra={"video_id": record.id, "title": record.title},
            )
            return IngestVideoResult(record=record, step=reached)

    async def _process(
        self,
        command: IngestVideoCommand,
        staged: StagedUploads,
        progress: IngestionProgress,
    ) -> VideoRecord:
        if staged.thumbnail is not None:
            thumb_source = staged.thumbnail.source
            mode = ThumbnailMode.FROM_SUPPLIED_IMAGE
            thumb_name = unique_name("thumb-custom", "png")
        else:
            thumb_source = staged.video.source
            mode = ThumbnailMode.FROM_VIDEO_FRAME
            thumb_name = unique_name("thumb", "png")

        thumbnail_png = await self._at(
            IngestionStep.STAGED, self._thumbnails.derive(thumb_source, mode)
        )
        self._advance(progress, IngestionStep.THUMBNAIL_READY, mode=mode.value)

        normalized: NormalizedVideo = await self._at(
            IngestionStep.THUMBNAIL_READY,
            self._normalizer.normalize(
                staged.video.source,
                content_type=staged.video.content_type,
                filename=staged.video.filename,
            ),
        )
        self._advance(progress, IngestionStep.VIDEO_READY)

        thumb_key = f"{self._thumbnails_prefix}/{thumb_name}"
        await self._put_thumbnail(thumb_key, thumbnail_png)
        progress.stored.append(thumb_key)
        self._advance(progress, IngestionStep.THUMBNAIL_UPLOADED, key=thumb_key)

        video_name = unique_name("video", normalized.extension)
        video_key = f"{self._videos_prefix}/{video_name}"
        await self._put_video(video_key, normalized)
        progress.stored.append(video_key)
        self._advance(progress, IngestionStep.VIDEO_UPLOADED, key=video_key)

        record = VideoRecord(
            title=command.title,
            creator=command.creator,
            video_url=self._media_url("video", video_key, video_name, command.base_url),
            thumbnail_url=self._media_url(
                "thumbnail", thumb_key, thumb_name, command.base_url
            ),
        )
        try:
            assigned_id = await self._catalog.insert_video(record)
        except Exception as e:
            raise CatalogWriteError(str(e), IngestionStep.VIDEO_UPLOADED) from e

        if assigned_id != record.id:
            record = record.model_copy(update={"id": assigned_id})
        self._advance(progress, IngestionStep.CATALOG_WRITTEN, video_id=record.id)
        return record

    async def _at(self, step: IngestionStep, awaitable: Awaitable[R]) -> R:
        """Await a stage, stamping its failure with the state reached."""
        try:
            return await awaitable
        except IngestionException as e:
            if e.step is None:
                e.step = step
            raise

    async def _put_thumbnail(self, key: str, data: bytes) -> None:
        try:
            await self._blob.upload(
                self._bucket, key, data, content_type=THUMBNAIL_CONTENT_TYPE
            )
        except Exception as e:
            raise UploadError(str(e), key, IngestionStep.VIDEO_READY) from e

    async def _put_video(self, key: str, video: NormalizedVideo) -> None:
        source = video.source
        try:
            if source.path is not None:
                await self._blob.upload_file(
                    self._bucket, key, source.path, content_type=video.content_type
                )
            else:
                await self._blob.upload(
                    self._bucket,
                    key,
                    source.data or b"",
                    content_type=video.content_type,
                )
        except Exception as e:
            raise UploadError(str(e), key, IngestionStep.THUMBNAIL_UPLOADED) from e

    def _media_url(self, kind: str, key: str, name: str, base_url: str) -> str:
        style = getattr(self._settings.media_urls, kind)
        if style == "public":
            return self._blob.public_url(key)
        route = "thumbnails" if kind == "thumbnail" else "videos"
        return f"{base_url.rstrip('/')}/api/{route}/{name}"

    def _advance(
        self,
        progress: IngestionProgress,
        step: IngestionStep,
        **extra: str,
    ) -> None:
        progress.step = step
        self._logger.info(
            f"Ingestion step: {step.value}", extra={"step": step.value, **extra}
        )

    def _fail(self, exc: IngestionException, progress: IngestionProgress) -> None:
        self._logger.error(
            f"Ingestion step: {IngestionStep.FAILED.value}",
            extra={
                "step": IngestionStep.FAILED.value,
                "failed_after": exc.step.value if exc.step else None,
                "stage": exc.stage,
                "reason": exc.reason,
            },
        )
        if progress.stored:
            self._logger.error(
                "Stored blobs left without a catalog record",
                extra={"orphaned_keys": progress.stored},
            )
