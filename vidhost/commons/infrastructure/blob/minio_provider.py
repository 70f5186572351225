"""S3-compatible implementation of blob storage on the MinIO client."""

import asyncio
import io
import time
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any, BinaryIO

from minio import Minio
from minio.error import S3Error

from vidhost.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
    BlobStream,
    HealthStatus,
)

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NoSuchBucket"})


class MinioBlobStorage(BlobStorageBase):
    """Blob storage backed by any S3-compatible service.

    Works with Cloudflare R2 (production), AWS S3 and MinIO (local
    development). Blocking SDK calls run in the default executor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        public_url: str,
        secure: bool = True,
        region: str | None = None,
    ) -> None:
        """Initialize the S3 client.

        Args:
            endpoint: Host[:port] of the service, e.g.
                "<account>.r2.cloudflarestorage.com".
            access_key: Access key ID.
            secret_key: Secret access key.
            public_url: Base URL under which the bucket is publicly readable.
            secure: Use HTTPS connection.
            region: Region name; R2 uses "auto".
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        self._public_url = public_url.rstrip("/")

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload an in-memory payload."""
        loop = asyncio.get_running_loop()

        if isinstance(data, bytes):
            data_io: BinaryIO = io.BytesIO(data)
            length = len(data)
        else:
            data.seek(0, io.SEEK_END)
            length = data.tell()
            data.seek(0)
            data_io = data

        def _upload() -> Any:
            return self._client.put_object(
                bucket_name=bucket,
                object_name=path,
                data=data_io,
                length=length,
                content_type=content_type,
            )

        result = await loop.run_in_executor(None, _upload)
        return BlobMetadata(
            path=path,
            size_bytes=length,
            content_type=content_type,
            etag=result.etag or "",
        )

    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload a local file, streaming it from disk."""
        loop = asyncio.get_running_loop()

        def _upload() -> Any:
            return self._client.fput_object(
                bucket_name=bucket,
                object_name=path,
                file_path=str(local_path),
                content_type=content_type,
            )

        result = await loop.run_in_executor(None, _upload)
        return BlobMetadata(
            path=path,
            size_bytes=local_path.stat().st_size,
            content_type=content_type,
            etag=result.etag or "",
        )

    async def download(self, bucket: str, path: str) -> bytes:
        """Download a whole blob into memory."""
        loop = asyncio.get_running_loop()

        def _download() -> bytes:
            try:
                response = self._client.get_object(bucket, path)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    raise BlobNotFoundError(bucket, path) from e
                raise
            try:
                data: bytes = response.read()
                return data
            finally:
                response.close()
                response.release_conn()

        return await loop.run_in_executor(None, _download)

    async def open_stream(
        self,
        bucket: str,
        path: str,
        chunk_size: int = 64 * 1024,
    ) -> BlobStream:
        """Open a blob for chunked reading."""
        loop = asyncio.get_running_loop()

        try:
            response = await loop.run_in_executor(
                None, self._client.get_object, bucket, path
            )
        except S3Error as e:
            if e.code in _MISSING_CODES:
                raise BlobNotFoundError(bucket, path) from e
            raise

        content_type = response.headers.get(
            "Content-Type", "application/octet-stream"
        )

        async def _chunks() -> AsyncIterator[bytes]:
            try:
                while True:
                    chunk: bytes = await loop.run_in_executor(
                        None, response.read, chunk_size
                    )
                    if not chunk:
                        break
                    yield chunk
            finally:
                response.close()
                response.release_conn()

        return BlobStream(path=path, content_type=content_type, chunks=_chunks())

    def public_url(self, path: str) -> str:
        """Return the public URL a browser can fetch the blob from."""
        return f"{self._public_url}/{path.lstrip('/')}"

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._client.list_buckets)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="Blob storage is healthy",
                details={"endpoint": self._endpoint},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Blob storage health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
