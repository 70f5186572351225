"""Media transcode services."""

from vidhost.infrastructure.media.base import (
    MediaSource,
    NormalizedVideo,
    ThumbnailDeriverBase,
    VideoNormalizerBase,
)
from vidhost.infrastructure.media.ffmpeg_normalizer import (
    FFmpegVideoNormalizer,
    PassthroughVideoNormalizer,
)
from vidhost.infrastructure.media.ffmpeg_runner import FFmpegError
from vidhost.infrastructure.media.ffmpeg_thumbnail import FFmpegThumbnailDeriver

__all__ = [
    # Base classes
    "MediaSource",
    "NormalizedVideo",
    "ThumbnailDeriverBase",
    "VideoNormalizerBase",
    # Implementations
    "FFmpegThumbnailDeriver",
    "FFmpegVideoNormalizer",
    "PassthroughVideoNormalizer",
    # Exceptions
    "FFmpegError",
]
