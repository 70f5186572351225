"""API route handlers."""

from vidhost.api.openapi.routes import auth, health, media, upload, videos

__all__ = [
    "auth",
    "health",
    "media",
    "upload",
    "videos",
]
