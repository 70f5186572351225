"""Video normalization stages: ffmpeg re-encode and pass-through."""

import re
from pathlib import PurePath

from vidhost.commons.telemetry import get_logger, timed
from vidhost.domain.exceptions import VideoNormalizationError
from vidhost.infrastructure.media.base import (
    MediaSource,
    NormalizedVideo,
    VideoNormalizerBase,
)
from vidhost.infrastructure.media.ffmpeg_runner import (
    FFmpegError,
    build_command,
    run_ffmpeg,
)

logger = get_logger(__name__)

DEFAULT_VIDEO_CONTENT_TYPE = "video/mp4"
DEFAULT_VIDEO_EXTENSION = "mp4"
_EXTENSION_RE = re.compile(r"^[a-z0-9]{1,5}$")


class FFmpegVideoNormalizer(VideoNormalizerBase):
    """Re-encodes uploads to H.264/AAC MP4.

    Output is fragmented MP4 so ffmpeg can write it to a pipe.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        video_codec: str = "libx264",
        audio_codec: str = "aac",
    ) -> None:
        self._ffmpeg = ffmpeg_path
        self._video_codec = video_codec
        self._audio_codec = audio_codec

    def command_for(self, source: MediaSource) -> list[str]:
        """Build the ffmpeg command for a source."""
        output_args = [
            "-c:v",
            self._video_codec,
            "-c:a",
            self._audio_codec,
            "-movflags",
            "frag_keyframe+empty_moov",
            "-f",
            "mp4",
        ]
        return build_command(self._ffmpeg, source, output_args)

    @timed()
    async def normalize(
        self,
        source: MediaSource,
        content_type: str | None = None,
        filename: str | None = None,
    ) -> NormalizedVideo:
        """Re-encode the video into memory."""
        try:
            data = await run_ffmpeg(self.command_for(source), source)
        except FFmpegError as e:
            raise VideoNormalizationError(e.detail) from e

        if not data:
            raise VideoNormalizationError("transcoder produced no output")

        logger.debug(
            "Video normalized",
            extra={"source": source.describe(), "size_bytes": len(data)},
        )
        return NormalizedVideo(
            source=MediaSource(data=data),
            content_type=DEFAULT_VIDEO_CONTENT_TYPE,
            extension=DEFAULT_VIDEO_EXTENSION,
        )


class PassthroughVideoNormalizer(VideoNormalizerBase):
    """Forwards the uploaded bytes unmodified."""

    async def normalize(
        self,
        source: MediaSource,
        content_type: str | None = None,
        filename: str | None = None,
    ) -> NormalizedVideo:
        """Keep the staged source, only settle content type and extension."""
        if not content_type or not content_type.startswith("video/"):
            content_type = DEFAULT_VIDEO_CONTENT_TYPE
        return NormalizedVideo(
            source=source,
            content_type=content_type,
            extension=extension_of(filename),
        )


def extension_of(filename: str | None) -> str:
    """Lower-case extension of a client file name, ``mp4`` when unusable."""
    if not filename:
        return DEFAULT_VIDEO_EXTENSION
    suffix = PurePath(filename).suffix.lstrip(".").lower()
    if _EXTENSION_RE.match(suffix):
        return suffix
    return DEFAULT_VIDEO_EXTENSION
