"""Flat-file implementation of the video catalog.

Each entity type is one JSON array stored as an object in the blob bucket
(``videos.json``, ``users.json``). Inserting reads the whole array, appends
and writes it back. Two concurrent inserts can therefore lose one of the
records; there is no locking or conditional put.
"""

import json
import time
from typing import Any

from vidhost.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    HealthStatus,
)
from vidhost.commons.infrastructure.catalog.base import CatalogStoreBase
from vidhost.commons.telemetry import get_logger
from vidhost.domain.models import UserRecord, VideoRecord, newest_first

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


class BlobCatalogStore(CatalogStoreBase):
    """Catalog kept as JSON documents next to the media."""

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        bucket: str,
        videos_object: str = "videos.json",
        users_object: str = "users.json",
    ) -> None:
        self._blob = blob_storage
        self._bucket = bucket
        self._videos_object = videos_object
        self._users_object = users_object

    async def ensure_schema_ready(self) -> None:
        """Seed missing arrays with ``[]``; existing arrays are left alone."""
        for name in (self._videos_object, self._users_object):
            try:
                await self._blob.download(self._bucket, name)
            except BlobNotFoundError:
                logger.info("Creating empty catalog object", extra={"object": name})
                await self._write_array(name, [])

    async def insert_video(self, record: VideoRecord) -> str:
        """Append the record and rewrite the whole array.

        The single put of the rewritten array is what makes the record
        visible, so a failed put leaves the previous listing intact.
        """
        documents = await self._read_array(self._videos_object)
        documents.append(record.to_document())
        await self._write_array(self._videos_object, documents)
        return record.id

    async def list_videos(self) -> list[VideoRecord]:
        """Return all records, newest first."""
        documents = await self._read_array(self._videos_object)
        return newest_first([VideoRecord.from_document(d) for d in documents])

    async def list_videos_by_creator(self, creator: str) -> list[VideoRecord]:
        """Return records of one creator, newest first."""
        return [r for r in await self.list_videos() if r.creator == creator]

    async def find_user_by_credentials(
        self,
        username: str,
        password: str,
    ) -> UserRecord | None:
        """Exact match on both username and password."""
        for document in await self._read_array(self._users_object):
            if (
                document.get("username") == username
                and document.get("password") == password
            ):
                return UserRecord.model_validate(document)
        return None

    async def _read_array(self, name: str) -> list[dict[str, Any]]:
        try:
            payload = await self._blob.download(self._bucket, name)
        except BlobNotFoundError:
            return []
        data = json.loads(payload)
        if not isinstance(data, list):
            raise ValueError(f"Catalog object {name} is not a JSON array")
        return data

    async def _write_array(self, name: str, documents: list[dict[str, Any]]) -> None:
        payload = json.dumps(documents, indent=2).encode("utf-8")
        await self._blob.upload(
            self._bucket, name, payload, content_type=JSON_CONTENT_TYPE
        )

    async def health_check(self) -> HealthStatus:
        """Healthy when the videos array can be read."""
        start = time.perf_counter()
        try:
            await self._read_array(self._videos_object)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="Flat-file catalog is healthy",
                details={"object": self._videos_object},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Flat-file catalog health check failed: {e}",
                details={"object": self._videos_object, "error": str(e)},
            )
