"""Catalog listing endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from vidhost.api.dependencies import LibraryServiceDep
from vidhost.api.middleware.error_handler import APIError

router = APIRouter()


@router.get(
    "/api/videos",
    summary="List videos",
    description="All catalogued videos, newest first.",
)
async def list_videos(service: LibraryServiceDep) -> list[dict[str, Any]]:
    """List every video in the catalog."""
    try:
        videos = await service.list_videos()
    except Exception as e:
        raise APIError(
            {"error": "Failed to fetch videos"},
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            log_message=f"Catalog listing failed: {e}",
        ) from e
    return [video.to_document() for video in videos]


@router.get(
    "/api/videos/bycreator",
    summary="List videos by creator",
    description="Videos whose creator matches the name exactly, newest first.",
)
async def list_videos_by_creator(
    service: LibraryServiceDep,
    name: Annotated[str | None, Query(description="Creator name")] = None,
) -> list[dict[str, Any]]:
    """List the videos of one creator."""
    if not name:
        raise APIError("Creator name is required.", status.HTTP_400_BAD_REQUEST)

    try:
        videos = await service.list_by_creator(name)
    except Exception as e:
        raise APIError(
            "Error fetching videos.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            log_message=f"Catalog listing by creator failed: {e}",
        ) from e
    return [video.to_document() for video in videos]
