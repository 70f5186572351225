"""Request-scoped holding area for raw uploads."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol
from uuid import uuid4

from vidhost.commons.telemetry import get_logger
from vidhost.infrastructure.media import MediaSource

logger = get_logger(__name__)

UploadKind = Literal["video", "thumbnail"]


class IncomingFile(Protocol):
    """A client file part as handed over by the web framework."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class StagedUpload:
    """One raw upload held for the duration of a request."""

    kind: UploadKind
    filename: str | None
    content_type: str | None
    source: MediaSource


@dataclass
class StagedUploads:
    """The files of a single upload request."""

    video: StagedUpload
    thumbnail: StagedUpload | None = None
    paths: list[Path] = field(default_factory=list, repr=False)


def is_present(upload: IncomingFile | None) -> bool:
    """Whether the client actually sent a file in this part."""
    return upload is not None and bool(upload.filename)


class UploadStaging:
    """Holds raw uploads on disk or in memory while a request is processed.

    In disk mode every upload gets its own uuid-named file under
    ``directory``; the files are removed when the staging context exits,
    whatever the outcome of the request.
    """

    def __init__(
        self,
        directory: Path | str = "uploads",
        mode: Literal["disk", "memory"] = "disk",
        chunk_size: int = 1024 * 1024,
    ) -> None:
        self._directory = Path(directory)
        self._mode = mode
        self._chunk_size = chunk_size

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def mode(self) -> str:
        return self._mode

    def prepare(self) -> None:
        """Create the staging directory (disk mode only)."""
        if self._mode == "disk":
            self._directory.mkdir(parents=True, exist_ok=True)
            logger.debug(
                "Staging directory ready", extra={"directory": str(self._directory)}
            )

    @asynccontextmanager
    async def stage(
        self,
        video: IncomingFile,
        thumbnail: IncomingFile | None = None,
    ) -> AsyncIterator[StagedUploads]:
        """Stage the uploads and release them on exit.

        Args:
            video: The uploaded video part.
            thumbnail: Optional custom thumbnail part.

        Yields:
            The staged uploads.
        """
        paths: list[Path] = []
        try:
            staged_video = await self._stage_one("video", video, paths)
            staged_thumbnail = None
            if thumbnail is not None and is_present(thumbnail):
                staged_thumbnail = await self._stage_one("thumbnail", thumbnail, paths)
            yield StagedUploads(
                video=staged_video,
                thumbnail=staged_thumbnail,
                paths=list(paths),
            )
        finally:
            self._release(paths)

    async def _stage_one(
        self,
        kind: UploadKind,
        upload: IncomingFile,
        paths: list[Path],
    ) -> StagedUpload:
        if self._mode == "memory":
            source = MediaSource(data=await upload.read())
        else:
            path = self._directory / f"{kind}-{uuid4().hex}"
            # Registered before writing so a partial file is still removed
            paths.append(path)
            with path.open("wb") as fh:
                while chunk := await upload.read(self._chunk_size):
                    fh.write(chunk)
            source = MediaSource(path=path)

        logger.debug(
            "Upload staged",
            extra={
                "kind": kind,
                "upload_filename": upload.filename,
                "source": source.describe(),
            },
        )
        return StagedUpload(
            kind=kind,
            filename=upload.filename,
            content_type=upload.content_type,
            source=source,
        )

    def _release(self, paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning(
                    "Failed to delete staged file",
                    extra={"path": str(path)},
                    exc_info=True,
                )
