"""Abstract base class for blob storage operations."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO


@dataclass
class BlobMetadata:
    """Metadata for a stored blob."""

    path: str
    size_bytes: int
    content_type: str
    etag: str


@dataclass
class BlobStream:
    """An open blob whose payload is read chunk by chunk."""

    path: str
    content_type: str
    chunks: AsyncIterator[bytes]


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class BlobNotFoundError(Exception):
    """Raised when a blob is not found."""

    def __init__(self, bucket: str, path: str) -> None:
        self.bucket = bucket
        self.path = path
        super().__init__(f"Blob not found: {bucket}/{path}")


class BlobStorageBase(ABC):
    """Abstract base class for blob storage operations.

    Puts overwrite: retrying a put with the same key replaces the object.
    Implementations never retry on their own; callers decide.
    """

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload an in-memory payload.

        Args:
            bucket: Target bucket name.
            path: Key within the bucket.
            data: File-like object or bytes to upload.
            content_type: MIME type of the content.

        Returns:
            Metadata of the uploaded blob.
        """

    @abstractmethod
    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a local file, streaming it from disk.

        Args:
            bucket: Target bucket name.
            path: Key within the bucket.
            local_path: File to read.
            content_type: MIME type of the content.

        Returns:
            Metadata of the uploaded blob.
        """

    @abstractmethod
    async def download(self, bucket: str, path: str) -> bytes:
        """Download a whole blob into memory.

        Raises:
            BlobNotFoundError: If blob doesn't exist.
        """

    @abstractmethod
    async def open_stream(
        self,
        bucket: str,
        path: str,
        chunk_size: int = 64 * 1024,
    ) -> BlobStream:
        """Open a blob for chunked reading.

        The object is looked up eagerly so a missing key fails here, before
        any response bytes are sent.

        Args:
            bucket: Source bucket name.
            path: Key within the bucket.
            chunk_size: Size of each chunk in bytes.

        Returns:
            Content type and an async iterator over the payload.

        Raises:
            BlobNotFoundError: If blob doesn't exist.
        """

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Return the public URL a browser can fetch the blob from."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """
