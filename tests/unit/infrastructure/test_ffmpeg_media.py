"""Unit tests for the ffmpeg thumbnail and video stages."""

import io
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from vidhost.domain.exceptions import ThumbnailDerivationError, VideoNormalizationError
from vidhost.domain.models import ThumbnailMode
from vidhost.infrastructure.media import (
    FFmpegThumbnailDeriver,
    FFmpegVideoNormalizer,
    MediaSource,
    PassthroughVideoNormalizer,
)
from vidhost.infrastructure.media.ffmpeg_normalizer import extension_of
from vidhost.infrastructure.media.ffmpeg_runner import FFmpegError, build_command

RUN = "vidhost.infrastructure.media.ffmpeg_runner.subprocess.run"


def _png(size: tuple[int, int] = (400, 225)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def _jpeg() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8)).save(buffer, format="JPEG")
    return buffer.getvalue()


def _completed(stdout: bytes = b"", returncode: int = 0, stderr: bytes = b""):
    return subprocess.CompletedProcess(
        args=["ffmpeg"], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestMediaSource:
    """Tests for MediaSource."""

    def test_requires_exactly_one_input(self):
        with pytest.raises(ValueError):
            MediaSource()
        with pytest.raises(ValueError):
            MediaSource(path=Path("a"), data=b"b")

    def test_describe(self):
        assert MediaSource(path=Path("/tmp/x")).describe() == "/tmp/x"
        assert MediaSource(data=b"abc").describe() == "<memory:3 bytes>"


class TestBuildCommand:
    """Tests for command assembly."""

    def test_file_source(self):
        cmd = build_command("ffmpeg", MediaSource(path=Path("/up/v")), ["-f", "mp4"])
        assert cmd[-4:] == ["/up/v", "-f", "mp4", "pipe:1"]
        assert cmd[cmd.index("-i") + 1] == "/up/v"

    def test_memory_source_reads_stdin(self):
        cmd = build_command("ffmpeg", MediaSource(data=b"x"), [], ["-ss", "5"])
        assert cmd.index("-ss") < cmd.index("-i")
        assert cmd[cmd.index("-i") + 1] == "pipe:0"

    def test_error_detail_prefers_stderr(self):
        assert FFmpegError("exit 1", "  Invalid data  ").detail == "Invalid data"
        assert FFmpegError("exit 1").detail == "exit 1"


class TestFFmpegThumbnailDeriver:
    """Tests for FFmpegThumbnailDeriver."""

    @pytest.fixture
    def deriver(self):
        return FFmpegThumbnailDeriver(ffmpeg_path="/usr/bin/ffmpeg")

    def test_video_frame_command(self, deriver):
        cmd = deriver.command_for(
            MediaSource(path=Path("/up/video")), ThumbnailMode.FROM_VIDEO_FRAME
        )

        assert cmd[0] == "/usr/bin/ffmpeg"
        assert cmd[cmd.index("-ss") + 1] == "00:00:05"
        assert cmd.index("-ss") < cmd.index("-i")
        assert cmd[cmd.index("-frames:v") + 1] == "1"
        assert cmd[cmd.index("-s") + 1] == "400x225"
        assert cmd[-5:] == ["-f", "image2pipe", "-vcodec", "png", "pipe:1"]

    def test_supplied_image_command_is_not_resized(self, deriver):
        cmd = deriver.command_for(
            MediaSource(path=Path("/up/thumb")), ThumbnailMode.FROM_SUPPLIED_IMAGE
        )

        assert "-ss" not in cmd
        assert "-s" not in cmd
        assert "png" in cmd

    async def test_derive_returns_png(self, deriver):
        png = _png()
        with patch(RUN, return_value=_completed(stdout=png)) as mock_run:
            result = await deriver.derive(
                MediaSource(path=Path("/up/video")), ThumbnailMode.FROM_VIDEO_FRAME
            )

        assert result == png
        assert mock_run.call_args.kwargs["input"] is None

    async def test_memory_source_is_piped(self, deriver):
        with patch(RUN, return_value=_completed(stdout=_png())) as mock_run:
            await deriver.derive(
                MediaSource(data=b"raw-image"), ThumbnailMode.FROM_SUPPLIED_IMAGE
            )

        assert mock_run.call_args.kwargs["input"] == b"raw-image"

    async def test_non_zero_exit_carries_stderr(self, deriver):
        failed = _completed(returncode=1, stderr=b"moov atom not found")
        with patch(RUN, return_value=failed):
            with pytest.raises(ThumbnailDerivationError) as exc_info:
                await deriver.derive(
                    MediaSource(path=Path("/up/v")), ThumbnailMode.FROM_VIDEO_FRAME
                )

        assert exc_info.value.reason == "moov atom not found"

    async def test_missing_binary(self, deriver):
        with patch(RUN, side_effect=FileNotFoundError):
            with pytest.raises(ThumbnailDerivationError) as exc_info:
                await deriver.derive(
                    MediaSource(path=Path("/up/v")), ThumbnailMode.FROM_VIDEO_FRAME
                )

        assert "not found" in exc_info.value.reason

    async def test_empty_output(self, deriver):
        with patch(RUN, return_value=_completed(stdout=b"")):
            with pytest.raises(ThumbnailDerivationError, match="no output"):
                await deriver.derive(
                    MediaSource(path=Path("/up/short")), ThumbnailMode.FROM_VIDEO_FRAME
                )

    async def test_undecodable_output(self, deriver):
        with patch(RUN, return_value=_completed(stdout=b"garbage")):
            with pytest.raises(ThumbnailDerivationError, match="not a valid image"):
                await deriver.derive(
                    MediaSource(path=Path("/up/v")), ThumbnailMode.FROM_VIDEO_FRAME
                )

    async def test_non_png_output(self, deriver):
        with patch(RUN, return_value=_completed(stdout=_jpeg())):
            with pytest.raises(ThumbnailDerivationError, match="expected PNG"):
                await deriver.derive(
                    MediaSource(path=Path("/up/t")), ThumbnailMode.FROM_SUPPLIED_IMAGE
                )


class TestFFmpegVideoNormalizer:
    """Tests for FFmpegVideoNormalizer."""

    def test_command(self):
        cmd = FFmpegVideoNormalizer().command_for(MediaSource(path=Path("/up/v")))

        assert cmd[cmd.index("-c:v") + 1] == "libx264"
        assert cmd[cmd.index("-c:a") + 1] == "aac"
        assert cmd[cmd.index("-movflags") + 1] == "frag_keyframe+empty_moov"
        assert cmd[-3:] == ["-f", "mp4", "pipe:1"]

    async def test_normalize_returns_mp4_in_memory(self):
        with patch(RUN, return_value=_completed(stdout=b"mp4-bytes")):
            result = await FFmpegVideoNormalizer().normalize(
                MediaSource(path=Path("/up/v")), "video/quicktime", "clip.mov"
            )

        assert result.source.data == b"mp4-bytes"
        assert result.content_type == "video/mp4"
        assert result.extension == "mp4"

    async def test_failure(self):
        with patch(RUN, return_value=_completed(returncode=1, stderr=b"bad codec")):
            with pytest.raises(VideoNormalizationError) as exc_info:
                await FFmpegVideoNormalizer().normalize(MediaSource(path=Path("/v")))

        assert exc_info.value.reason == "bad codec"


class TestPassthroughVideoNormalizer:
    """Tests for PassthroughVideoNormalizer."""

    async def test_keeps_source_and_content_type(self):
        source = MediaSource(path=Path("/up/v"))

        result = await PassthroughVideoNormalizer().normalize(
            source, "video/webm", "clip.WEBM"
        )

        assert result.source is source
        assert result.content_type == "video/webm"
        assert result.extension == "webm"

    async def test_falls_back_to_mp4(self):
        result = await PassthroughVideoNormalizer().normalize(
            MediaSource(data=b"v"), "application/octet-stream", None
        )

        assert result.content_type == "video/mp4"
        assert result.extension == "mp4"

    def test_extension_of(self):
        assert extension_of("movie.MP4") == "mp4"
        assert extension_of("noext") == "mp4"
        assert extension_of("weird.ext-with-dash") == "mp4"
        assert extension_of(None) == "mp4"
