"""FFmpeg implementation of thumbnail derivation."""

import io

from PIL import Image, UnidentifiedImageError

from vidhost.commons.telemetry import get_logger, timed
from vidhost.domain.exceptions import ThumbnailDerivationError
from vidhost.domain.models import ThumbnailMode
from vidhost.infrastructure.media.base import MediaSource, ThumbnailDeriverBase
from vidhost.infrastructure.media.ffmpeg_runner import (
    FFmpegError,
    build_command,
    run_ffmpeg,
)

logger = get_logger(__name__)


class FFmpegThumbnailDeriver(ThumbnailDeriverBase):
    """Produces PNG thumbnails with an external ffmpeg process.

    A supplied image is re-encoded at its own size. A video yields one
    frame taken at ``frame_offset`` and scaled to ``frame_size``. Videos
    shorter than the offset are not special-cased: whatever ffmpeg does
    (error or empty output) is reported as a derivation failure.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        frame_offset: str = "00:00:05",
        frame_size: tuple[int, int] = (400, 225),
    ) -> None:
        """Initialize the deriver.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            frame_offset: Seek position for frames taken from videos.
            frame_size: Width and height of frames taken from videos.
        """
        self._ffmpeg = ffmpeg_path
        self._offset = frame_offset
        self._size = frame_size

    def command_for(self, source: MediaSource, mode: ThumbnailMode) -> list[str]:
        """Build the ffmpeg command for a source and mode."""
        output_args = ["-frames:v", "1"]
        input_args: list[str] = []
        if mode == ThumbnailMode.FROM_VIDEO_FRAME:
            input_args = ["-ss", self._offset]
            width, height = self._size
            output_args += ["-s", f"{width}x{height}"]
        output_args += ["-f", "image2pipe", "-vcodec", "png"]
        return build_command(self._ffmpeg, source, output_args, input_args)

    @timed()
    async def derive(self, source: MediaSource, mode: ThumbnailMode) -> bytes:
        """Produce PNG bytes from an image or a video."""
        cmd = self.command_for(source, mode)
        try:
            data = await run_ffmpeg(cmd, source)
        except FFmpegError as e:
            raise ThumbnailDerivationError(e.detail) from e

        if not data:
            raise ThumbnailDerivationError("transcoder produced no output")

        width, height = self._inspect(data)
        logger.debug(
            "Thumbnail derived",
            extra={
                "mode": mode.value,
                "width": width,
                "height": height,
                "size_bytes": len(data),
            },
        )
        return data

    def _inspect(self, data: bytes) -> tuple[int, int]:
        """Check the output decodes as a PNG and return its dimensions."""
        try:
            with Image.open(io.BytesIO(data)) as img:
                if img.format != "PNG":
                    raise ThumbnailDerivationError(
                        f"transcoder produced {img.format}, expected PNG"
                    )
                img.verify()
                width, height = img.size
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ThumbnailDerivationError(f"output is not a valid image: {e}") from e
        return width, height
