"""Runs the ffmpeg binary with piped output."""

import asyncio
import subprocess

from vidhost.commons.telemetry import get_logger
from vidhost.infrastructure.media.base import MediaSource

logger = get_logger(__name__)


class FFmpegError(Exception):
    """Raised when ffmpeg cannot be started or exits non-zero."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        super().__init__(message)

    @property
    def detail(self) -> str:
        """The tool's own error text when it printed any."""
        return self.stderr.strip() or str(self)


def build_command(
    ffmpeg_path: str,
    source: MediaSource,
    output_args: list[str],
    input_args: list[str] | None = None,
) -> list[str]:
    """Assemble an ffmpeg command line that writes to stdout.

    File sources are read by ffmpeg directly; memory sources are fed on
    stdin.
    """
    src = str(source.path) if source.path is not None else "pipe:0"
    return [
        ffmpeg_path,
        "-hide_banner",
        "-loglevel",
        "error",
        *(input_args or []),
        "-i",
        src,
        *output_args,
        "pipe:1",
    ]


async def run_ffmpeg(cmd: list[str], source: MediaSource) -> bytes:
    """Run the command and collect everything it writes to stdout.

    Args:
        cmd: Command from build_command.
        source: The same source the command was built for.

    Returns:
        Collected stdout, possibly empty.

    Raises:
        FFmpegError: If the binary is missing or exits with an error.
    """
    loop = asyncio.get_running_loop()
    logger.debug("Running ffmpeg", extra={"cmd": cmd, "source": source.describe()})

    try:
        result = await loop.run_in_executor(
            None,
            lambda: subprocess.run(
                cmd,
                input=source.data,
                capture_output=True,
                check=False,
            ),
        )
    except FileNotFoundError as e:
        raise FFmpegError(f"ffmpeg executable not found: {cmd[0]}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        raise FFmpegError(f"ffmpeg exited with status {result.returncode}", stderr)

    stdout: bytes = result.stdout
    return stdout
