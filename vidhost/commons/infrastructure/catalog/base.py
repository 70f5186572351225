"""Abstract base class for the video catalog."""

from abc import ABC, abstractmethod

from vidhost.commons.infrastructure.blob.base import HealthStatus
from vidhost.domain.models import UserRecord, VideoRecord


class CatalogStoreBase(ABC):
    """Persistence contract for video metadata and user accounts.

    Implementations:
    - MongoDB (document store)
    - SQL database through SQLAlchemy (relational store)
    - JSON arrays kept in the blob bucket (flat file)

    Every backend returns listings newest first and filters creators by
    exact match.
    """

    @abstractmethod
    async def ensure_schema_ready(self) -> None:
        """Create tables, collections or indexes.

        Called once at startup. Safe to call when everything already
        exists.
        """

    @abstractmethod
    async def insert_video(self, record: VideoRecord) -> str:
        """Persist a record, all or nothing.

        Args:
            record: Fully built record.

        Returns:
            The id under which the record is stored. Backends that assign
            their own keys return that key rather than ``record.id``.
        """

    @abstractmethod
    async def list_videos(self) -> list[VideoRecord]:
        """Return all records, newest first."""

    @abstractmethod
    async def list_videos_by_creator(self, creator: str) -> list[VideoRecord]:
        """Return records whose creator equals ``creator``, newest first."""

    @abstractmethod
    async def find_user_by_credentials(
        self,
        username: str,
        password: str,
    ) -> UserRecord | None:
        """Return the account matching both values exactly, if any."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check backend health.

        Returns:
            Health status with latency info.
        """

    async def close(self) -> None:
        """Release connections. Backends without connections do nothing."""
