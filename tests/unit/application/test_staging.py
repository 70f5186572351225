"""Unit tests for upload staging."""

import io

import pytest

from vidhost.application.services.staging import UploadStaging, is_present


class FakeUpload:
    """Minimal stand-in for a framework upload part."""

    def __init__(
        self,
        data: bytes,
        filename: str | None = "clip.mp4",
        content_type: str | None = "video/mp4",
    ):
        self._buffer = io.BytesIO(data)
        self.filename = filename
        self.content_type = content_type

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


class TestIsPresent:
    """Tests for upload presence detection."""

    def test_none(self):
        assert is_present(None) is False

    def test_empty_filename(self):
        assert is_present(FakeUpload(b"", filename="")) is False

    def test_present(self):
        assert is_present(FakeUpload(b"x")) is True


class TestUploadStagingDisk:
    """Tests for disk staging."""

    @pytest.fixture
    def staging(self, tmp_path):
        staging = UploadStaging(
            directory=tmp_path / "uploads", mode="disk", chunk_size=4
        )
        staging.prepare()
        return staging

    def test_prepare_creates_directory(self, staging):
        assert staging.directory.is_dir()

    async def test_files_written_and_removed(self, staging):
        async with staging.stage(FakeUpload(b"video-bytes")) as staged:
            path = staged.video.source.path
            assert path is not None
            assert path.read_bytes() == b"video-bytes"
            assert staged.video.filename == "clip.mp4"
            assert staged.video.content_type == "video/mp4"
            assert staged.thumbnail is None

        assert not path.exists()
        assert list(staging.directory.iterdir()) == []

    async def test_thumbnail_staged_when_sent(self, staging):
        thumb = FakeUpload(b"jpeg", filename="cover.jpg", content_type="image/jpeg")
        async with staging.stage(FakeUpload(b"v"), thumb) as staged:
            assert staged.thumbnail is not None
            assert staged.thumbnail.kind == "thumbnail"
            assert staged.thumbnail.source.path.read_bytes() == b"jpeg"
            assert len(staged.paths) == 2

        assert list(staging.directory.iterdir()) == []

    async def test_empty_thumbnail_part_is_ignored(self, staging):
        empty = FakeUpload(b"", filename="")
        async with staging.stage(FakeUpload(b"v"), empty) as staged:
            assert staged.thumbnail is None

    async def test_unique_names_per_upload(self, staging):
        async with staging.stage(FakeUpload(b"a")) as first:
            async with staging.stage(FakeUpload(b"b")) as second:
                assert first.video.source.path != second.video.source.path

    async def test_files_removed_when_body_raises(self, staging):
        with pytest.raises(RuntimeError):
            async with staging.stage(FakeUpload(b"v"), FakeUpload(b"t", "t.png")):
                raise RuntimeError("pipeline failed")

        assert list(staging.directory.iterdir()) == []

    async def test_deletion_failure_is_swallowed(self, staging, monkeypatch):
        from pathlib import Path

        def broken_unlink(self, missing_ok=False):
            raise PermissionError("locked")

        async with staging.stage(FakeUpload(b"v")) as staged:
            monkeypatch.setattr(Path, "unlink", broken_unlink)
            result = staged.video.kind

        monkeypatch.undo()
        assert result == "video"


class TestUploadStagingMemory:
    """Tests for in-memory staging."""

    async def test_buffers_in_memory(self, tmp_path):
        staging = UploadStaging(directory=tmp_path / "unused", mode="memory")
        staging.prepare()

        async with staging.stage(FakeUpload(b"video-bytes")) as staged:
            assert staged.video.source.data == b"video-bytes"
            assert staged.video.source.path is None

        assert not (tmp_path / "unused").exists()
