"""Run the HTTP server: ``python -m vidhost``."""

import sys

import uvicorn

from vidhost.commons.settings import get_settings
from vidhost.commons.telemetry import configure_logging


def main() -> int:
    """Validate configuration, then serve until interrupted."""
    settings = get_settings()
    logger = configure_logging(
        level=settings.telemetry.log_level,
        format_type=settings.telemetry.log_format,
        logger_name="vidhost",
    )

    missing = settings.blob_storage.missing_fields()
    if missing:
        logger.error(
            "Missing required blob_storage settings",
            extra={"missing": missing},
        )
        return 1

    uvicorn.run(
        "vidhost.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
