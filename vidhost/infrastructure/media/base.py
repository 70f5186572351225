"""Abstract base classes for media transcode stages."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from vidhost.domain.models import ThumbnailMode


@dataclass(frozen=True)
class MediaSource:
    """Input to a transcode stage: a file on disk or bytes in memory."""

    path: Path | None = None
    data: bytes | None = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.data is None):
            raise ValueError("MediaSource needs exactly one of path or data")

    @property
    def is_file(self) -> bool:
        return self.path is not None

    def describe(self) -> str:
        """Short label for logs."""
        if self.path is not None:
            return str(self.path)
        return f"<memory:{len(self.data or b'')} bytes>"


@dataclass(frozen=True)
class NormalizedVideo:
    """Video ready to be uploaded."""

    source: MediaSource
    content_type: str
    extension: str


class ThumbnailDeriverBase(ABC):
    """Produces a single PNG thumbnail.

    Implementations should handle:
    - FFmpeg (external process)
    """

    @abstractmethod
    async def derive(self, source: MediaSource, mode: ThumbnailMode) -> bytes:
        """Produce PNG bytes from an image or a video.

        Args:
            source: The staged image or video.
            mode: Re-encode a supplied image, or grab a frame from a video.

        Returns:
            PNG-encoded thumbnail.

        Raises:
            ThumbnailDerivationError: If the transcode fails or yields nothing.
        """


class VideoNormalizerBase(ABC):
    """Turns the uploaded video into the form that gets stored."""

    @abstractmethod
    async def normalize(
        self,
        source: MediaSource,
        content_type: str | None = None,
        filename: str | None = None,
    ) -> NormalizedVideo:
        """Prepare a video for storage.

        Args:
            source: The staged video.
            content_type: MIME type declared by the client.
            filename: Original file name, used for the extension.

        Returns:
            Video payload with its content type and file extension.

        Raises:
            VideoNormalizationError: If re-encoding fails.
        """
