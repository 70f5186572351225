"""Shared fixtures for unit tests."""

from pathlib import Path
from typing import BinaryIO

import pytest

from vidhost.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
    BlobStream,
    HealthStatus,
)


class InMemoryBlobStorage(BlobStorageBase):
    """Dictionary-backed blob store."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.fail_uploads = False

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        if self.fail_uploads:
            raise ConnectionError("put failed")
        payload = data if isinstance(data, bytes) else data.read()
        self.objects[(bucket, path)] = (payload, content_type)
        return BlobMetadata(path, len(payload), content_type, "etag")

    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        return await self.upload(bucket, path, local_path.read_bytes(), content_type)

    async def download(self, bucket: str, path: str) -> bytes:
        try:
            return self.objects[(bucket, path)][0]
        except KeyError:
            raise BlobNotFoundError(bucket, path) from None

    async def open_stream(
        self, bucket: str, path: str, chunk_size: int = 64 * 1024
    ) -> BlobStream:
        data = await self.download(bucket, path)

        async def _chunks():
            yield data

        return BlobStream(path, self.objects[(bucket, path)][1], _chunks())

    def public_url(self, path: str) -> str:
        return f"https://pub.example.com/{path}"

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.0)


@pytest.fixture
def memory_blob() -> InMemoryBlobStorage:
    """Empty in-memory blob store."""
    return InMemoryBlobStorage()
