"""Read-side use cases: listings, login and media proxy."""

from typing import Literal

from vidhost.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    BlobStream,
)
from vidhost.commons.infrastructure.catalog.base import CatalogStoreBase
from vidhost.commons.telemetry import get_logger
from vidhost.domain.exceptions import AuthenticationError, MediaNotFoundError
from vidhost.domain.models import UserRecord, VideoRecord

MediaKind = Literal["thumbnail", "video"]


class LibraryService:
    """Serves catalog listings, logins and stored media to clients."""

    def __init__(
        self,
        catalog: CatalogStoreBase,
        blob_storage: BlobStorageBase,
        bucket: str,
        prefixes: dict[str, str] | None = None,
    ) -> None:
        """Initialize library service.

        Args:
            catalog: Catalog backend.
            blob_storage: Blob storage holding thumbnails and videos.
            bucket: Bucket name.
            prefixes: Key prefix per media kind.
        """
        self._catalog = catalog
        self._blob = blob_storage
        self._bucket = bucket
        self._prefixes = prefixes or {"thumbnail": "thumbnails", "video": "videos"}
        self._logger = get_logger(__name__)

    async def list_videos(self) -> list[VideoRecord]:
        """All videos, newest first."""
        return await self._catalog.list_videos()

    async def list_by_creator(self, creator: str) -> list[VideoRecord]:
        """Videos whose creator matches exactly, newest first."""
        return await self._catalog.list_videos_by_creator(creator)

    async def login(self, username: str, password: str) -> UserRecord:
        """Check credentials against the catalog.

        Raises:
            AuthenticationError: If no account matches both fields.
        """
        user = await self._catalog.find_user_by_credentials(username, password)
        if user is None:
            self._logger.info("Login rejected", extra={"username": username})
            raise AuthenticationError()
        self._logger.info("Login accepted", extra={"username": username})
        return user

    async def open_media(self, kind: MediaKind, file_name: str) -> BlobStream:
        """Open a stored thumbnail or video for streaming.

        Args:
            kind: Which prefix the file lives under.
            file_name: Name within that prefix.

        Raises:
            MediaNotFoundError: If the key does not exist.
        """
        key = f"{self._prefixes[kind]}/{file_name}"
        try:
            return await self._blob.open_stream(self._bucket, key)
        except BlobNotFoundError as e:
            raise MediaNotFoundError(key) from e
