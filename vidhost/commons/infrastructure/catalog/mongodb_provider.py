"""MongoDB implementation of the video catalog."""

import time
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from vidhost.commons.infrastructure.blob.base import HealthStatus
from vidhost.commons.infrastructure.catalog.base import CatalogStoreBase
from vidhost.commons.telemetry import get_logger
from vidhost.domain.models import UserRecord, VideoRecord

# IndexOptionsConflict / IndexKeySpecsConflict: an index with that name exists
_INDEX_EXISTS_CODES = frozenset({85, 86})

logger = get_logger(__name__)


class MongoCatalogStore(CatalogStoreBase):
    """Document-store catalog.

    Uses Motor for async operations. The record ``id`` is stored as
    MongoDB's ``_id``.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        username: str = "",
        password: str = "",
        timeout_ms: int = 10000,
        videos_collection: str = "videos",
        users_collection: str = "users",
    ) -> None:
        """Initialize MongoDB client.

        Args:
            connection_string: MongoDB connection URI.
            database_name: Name of the database to use.
            username: Optional user, when not embedded in the URI.
            password: Optional password, when not embedded in the URI.
            timeout_ms: Server selection timeout.
            videos_collection: Collection holding video records.
            users_collection: Collection holding accounts.
        """
        options: dict[str, Any] = {"serverSelectionTimeoutMS": timeout_ms}
        if username:
            options["username"] = username
            options["password"] = password

        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string, **options
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = self._client[database_name]
        self._database_name = database_name
        self._videos = videos_collection
        self._users = users_collection

    async def ensure_schema_ready(self) -> None:
        """Create the lookup indexes, tolerating ones that already exist."""
        await self._create_index(self._videos, [("creator", ASCENDING)])
        await self._create_index(self._videos, [("uploadedAt", DESCENDING)])
        await self._create_index(self._users, [("username", ASCENDING)], unique=True)

    async def _create_index(
        self,
        collection: str,
        fields: list[tuple[str, int]],
        unique: bool = False,
    ) -> None:
        try:
            name = await self._db[collection].create_index(fields, unique=unique)
        except OperationFailure as e:
            if e.code not in _INDEX_EXISTS_CODES:
                raise
            logger.info(
                "Index already exists, skipping",
                extra={"collection": collection, "fields": fields},
            )
            return
        logger.debug("Index ready", extra={"collection": collection, "index": name})

    async def insert_video(self, record: VideoRecord) -> str:
        """Insert a record as a single document."""
        doc = record.model_dump(by_alias=True)
        doc["_id"] = doc.pop("id")
        result = await self._db[self._videos].insert_one(doc)
        return str(result.inserted_id)

    async def list_videos(self) -> list[VideoRecord]:
        """Return all records, newest first."""
        return await self._find_videos({})

    async def list_videos_by_creator(self, creator: str) -> list[VideoRecord]:
        """Return records of one creator, newest first."""
        return await self._find_videos({"creator": creator})

    async def _find_videos(self, filters: dict[str, Any]) -> list[VideoRecord]:
        cursor = self._db[self._videos].find(filters).sort("uploadedAt", DESCENDING)

        results: list[VideoRecord] = []
        async for doc in cursor:
            doc["id"] = str(doc.pop("_id"))
            results.append(VideoRecord.from_document(doc))
        return results

    async def find_user_by_credentials(
        self,
        username: str,
        password: str,
    ) -> UserRecord | None:
        """Exact match on both username and password."""
        doc = await self._db[self._users].find_one(
            {"username": username, "password": password}
        )
        if doc is None:
            return None
        doc.pop("_id", None)
        return UserRecord.model_validate(doc)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.admin.command("ping")
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MongoDB is healthy",
                details={"database": self._database_name},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MongoDB health check failed: {e}",
                details={"database": self._database_name, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the client connection."""
        self._client.close()
