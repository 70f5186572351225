"""Unit tests for the relational catalog provider (SQLite via aiosqlite)."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import Text

from vidhost.commons.infrastructure.catalog.sql_provider import (
    SqlCatalogStore,
    UserRow,
    VideoRow,
    async_database_url,
)
from vidhost.commons.settings.loader import SettingsLoader
from vidhost.domain.models import VideoRecord


def _record(title: str, creator: str, uploaded_at: datetime) -> VideoRecord:
    return VideoRecord(
        title=title,
        creator=creator,
        video_url=f"https://pub.example.com/videos/{title}.mp4",
        thumbnail_url=f"http://localhost:3000/api/thumbnails/{title}.png",
        uploaded_at=uploaded_at,
    )


class TestSqlCatalogStore:
    """Tests for SqlCatalogStore against a file-backed SQLite database."""

    @pytest.fixture
    async def catalog(self, tmp_path):
        store = SqlCatalogStore(url=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
        await store.ensure_schema_ready()
        yield store
        await store.close()

    async def test_ensure_schema_ready_is_idempotent(self, catalog):
        await catalog.ensure_schema_ready()
        assert await catalog.list_videos() == []

    async def test_insert_assigns_integer_ids(self, catalog):
        now = datetime.now(UTC)
        first = await catalog.insert_video(_record("a", "alice", now))
        second = await catalog.insert_video(_record("b", "alice", now))

        assert first.isdigit()
        assert int(second) > int(first)

    async def test_list_videos_newest_first(self, catalog):
        now = datetime.now(UTC)
        await catalog.insert_video(_record("old", "alice", now - timedelta(hours=1)))
        await catalog.insert_video(_record("new", "bob", now))

        titles = [v.title for v in await catalog.list_videos()]

        assert titles == ["new", "old"]

    async def test_list_by_creator_is_exact_subset(self, catalog):
        now = datetime.now(UTC)
        await catalog.insert_video(_record("a", "alice", now))
        await catalog.insert_video(_record("b", "Alice", now))
        await catalog.insert_video(_record("c", "alice", now + timedelta(minutes=1)))

        by_alice = await catalog.list_videos_by_creator("alice")
        everything = {v.id for v in await catalog.list_videos()}

        assert [v.title for v in by_alice] == ["c", "a"]
        assert {v.id for v in by_alice} <= everything

    async def test_records_round_trip(self, catalog):
        uploaded = datetime(2024, 3, 1, 10, 30, tzinfo=UTC)
        record_id = await catalog.insert_video(_record("clip", "alice", uploaded))

        [stored] = await catalog.list_videos()

        assert stored.id == record_id
        assert stored.video_url == "https://pub.example.com/videos/clip.mp4"
        assert stored.uploaded_at == uploaded

    async def test_find_user_by_credentials(self, catalog):
        async with catalog._sessions() as session, session.begin():
            session.add(UserRow(username="alice", password="pw", name="Alice"))

        user = await catalog.find_user_by_credentials("alice", "pw")

        assert user is not None
        assert user.display_name == "Alice"
        assert await catalog.find_user_by_credentials("alice", "nope") is None
        assert await catalog.find_user_by_credentials("carol", "pw") is None

    async def test_health_check(self, catalog):
        status = await catalog.health_check()
        assert status.healthy is True
        assert status.details == {"backend": "sqlite"}

    async def test_long_title_and_creator(self, catalog):
        title = "t" * 300
        creator = "c" * 300
        await catalog.insert_video(_record(title, creator, datetime.now(UTC)))

        [stored] = await catalog.list_videos_by_creator(creator)

        assert stored.title == title
        assert stored.creator == creator

    def test_title_and_creator_are_unbounded_text(self):
        columns = VideoRow.__table__.c
        assert isinstance(columns.title.type, Text)
        assert isinstance(columns.creator.type, Text)


class TestAsyncDatabaseUrl:
    """Tests for deployment database URL handling."""

    @pytest.mark.parametrize(
        "url",
        [
            "postgresql://user:pw@db.example.com:5432/video_platform",
            "postgres://user:pw@db.example.com:5432/video_platform",
        ],
    )
    def test_plain_postgres_uses_asyncpg(self, url):
        engine_url, ssl = async_database_url(url)

        assert engine_url.drivername == "postgresql+asyncpg"
        assert engine_url.host == "db.example.com"
        assert engine_url.database == "video_platform"
        assert ssl is False

    def test_explicit_driver_kept(self):
        engine_url, _ = async_database_url("sqlite+aiosqlite:///catalog.db")
        assert engine_url.drivername == "sqlite+aiosqlite"

    def test_sslmode_require_becomes_tls_flag(self):
        engine_url, ssl = async_database_url(
            "postgresql://user:pw@db.example.com/video_platform?sslmode=require"
        )

        assert "sslmode" not in engine_url.query
        assert ssl is True

    def test_sslmode_disable_keeps_setting(self):
        _, ssl = async_database_url(
            "postgresql://user:pw@db.example.com/video_platform?sslmode=disable"
        )
        assert ssl is False

    def test_legacy_database_url_builds_asyncpg_engine(self, monkeypatch, tmp_path):
        monkeypatch.setenv(
            "DATABASE_URL", "postgresql://user:pw@db.example.com:5432/video_platform"
        )
        settings = SettingsLoader(
            config_dir=tmp_path, environment="dev", env_file=tmp_path / ".env"
        ).load()

        with patch(
            "vidhost.commons.infrastructure.catalog.sql_provider.create_async_engine"
        ) as mock_create:
            SqlCatalogStore(url=settings.catalog.url, ssl=True)

        engine_url = mock_create.call_args.args[0]
        assert engine_url.drivername == "postgresql+asyncpg"
        assert mock_create.call_args.kwargs["connect_args"] == {"ssl": "require"}

    def test_tls_not_passed_to_sqlite(self):
        with patch(
            "vidhost.commons.infrastructure.catalog.sql_provider.create_async_engine"
        ) as mock_create:
            SqlCatalogStore(url="sqlite+aiosqlite:///catalog.db", ssl=True)

        assert mock_create.call_args.kwargs["connect_args"] == {}
