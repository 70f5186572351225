"""Relational implementation of the video catalog (SQLAlchemy async)."""

import time
from datetime import datetime
from typing import Any

from sqlalchemy import URL, DateTime, Integer, String, Text, make_url, select, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from vidhost.commons.infrastructure.blob.base import HealthStatus
from vidhost.commons.infrastructure.catalog.base import CatalogStoreBase
from vidhost.domain.models import UserRecord, VideoRecord


ASYNC_POSTGRES_DRIVER = "postgresql+asyncpg"

# libpq sslmode values that ask for an encrypted connection
_TLS_SSLMODES = {"require", "verify-ca", "verify-full"}


def async_database_url(url: str, ssl: bool = False) -> tuple[URL, bool]:
    """Point a plain Postgres URL at the asyncpg driver.

    Deployment URLs such as ``postgres://user:pw@host/db`` name no driver.
    asyncpg does not accept ``sslmode`` in the query string, so it is removed
    and folded into the returned TLS flag.

    Args:
        url: Database URL as configured.
        ssl: TLS requested through settings.

    Returns:
        The URL to build the engine from and whether TLS is required.
    """
    parsed = make_url(url)
    if parsed.drivername in ("postgres", "postgresql"):
        parsed = parsed.set(drivername=ASYNC_POSTGRES_DRIVER)

    if parsed.drivername == ASYNC_POSTGRES_DRIVER and "sslmode" in parsed.query:
        sslmode = parsed.query["sslmode"]
        parsed = parsed.difference_update_query(["sslmode"])
        ssl = ssl or sslmode in _TLS_SSLMODES

    return parsed, ssl


class Base(DeclarativeBase):
    """Declarative base for catalog tables."""


class VideoRow(Base):
    __tablename__ = "videos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    creator: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    video_url: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_url: Mapped[str] = mapped_column(Text, nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    def to_record(self) -> VideoRecord:
        return VideoRecord(
            id=str(self.id),
            title=self.title,
            creator=self.creator,
            video_url=self.video_url,
            thumbnail_url=self.thumbnail_url,
            uploaded_at=self.uploaded_at,
        )


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class SqlCatalogStore(CatalogStoreBase):
    """Relational catalog.

    Video ids are auto-increment integers assigned by the database and
    exposed as strings.
    """

    def __init__(
        self,
        url: str,
        ssl: bool = False,
        echo: bool = False,
    ) -> None:
        """Create the async engine.

        Args:
            url: SQLAlchemy URL; plain Postgres URLs are switched to asyncpg.
            ssl: Require TLS on the driver connection.
            echo: Log every SQL statement.
        """
        engine_url, ssl = async_database_url(url, ssl)
        connect_args: dict[str, Any] = {}
        if ssl and engine_url.drivername == ASYNC_POSTGRES_DRIVER:
            connect_args["ssl"] = "require"

        self._engine: AsyncEngine = create_async_engine(
            engine_url,
            echo=echo,
            connect_args=connect_args,
        )
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

    async def ensure_schema_ready(self) -> None:
        """Create missing tables; existing ones are left untouched."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def insert_video(self, record: VideoRecord) -> str:
        """Insert the record in its own transaction."""
        row = VideoRow(
            title=record.title,
            creator=record.creator,
            video_url=record.video_url,
            thumbnail_url=record.thumbnail_url,
            uploaded_at=record.uploaded_at,
        )
        async with self._sessions() as session, session.begin():
            session.add(row)
            await session.flush()
            return str(row.id)

    async def list_videos(self) -> list[VideoRecord]:
        """Return all records, newest first."""
        return await self._select_videos(None)

    async def list_videos_by_creator(self, creator: str) -> list[VideoRecord]:
        """Return records of one creator, newest first."""
        return await self._select_videos(creator)

    async def _select_videos(self, creator: str | None) -> list[VideoRecord]:
        stmt = select(VideoRow)
        if creator is not None:
            stmt = stmt.where(VideoRow.creator == creator)
        stmt = stmt.order_by(VideoRow.uploaded_at.desc(), VideoRow.id.desc())

        async with self._sessions() as session:
            rows = (await session.scalars(stmt)).all()
        return [row.to_record() for row in rows]

    async def find_user_by_credentials(
        self,
        username: str,
        password: str,
    ) -> UserRecord | None:
        """Exact match on both username and password."""
        stmt = select(UserRow).where(
            UserRow.username == username,
            UserRow.password == password,
        )
        async with self._sessions() as session:
            row = (await session.scalars(stmt)).first()
        if row is None:
            return None
        return UserRecord(
            username=row.username,
            password=row.password,
            display_name=row.name,
        )

    async def health_check(self) -> HealthStatus:
        """Run a trivial query."""
        start = time.perf_counter()
        backend = self._engine.url.get_backend_name()
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="SQL catalog is healthy",
                details={"backend": backend},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"SQL catalog health check failed: {e}",
                details={"backend": backend, "error": str(e)},
            )

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self._engine.dispose()
