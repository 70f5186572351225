"""Byte proxy for stored thumbnails and videos."""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from vidhost.api.dependencies import LibraryServiceDep
from vidhost.application.services.library import MediaKind

router = APIRouter()

CORP_HEADER = "Cross-Origin-Resource-Policy"


async def _proxy(
    service: LibraryServiceDep,
    kind: MediaKind,
    file_name: str,
) -> StreamingResponse:
    blob = await service.open_media(kind, file_name)
    return StreamingResponse(
        blob.chunks,
        media_type=blob.content_type,
        headers={CORP_HEADER: "cross-origin"},
    )


@router.get(
    "/api/thumbnails/{file_name}",
    summary="Fetch a thumbnail",
    response_class=StreamingResponse,
)
async def get_thumbnail(
    file_name: str,
    service: LibraryServiceDep,
) -> StreamingResponse:
    """Stream a stored thumbnail."""
    return await _proxy(service, "thumbnail", file_name)


@router.get(
    "/api/videos/{file_name}",
    summary="Fetch a video",
    response_class=StreamingResponse,
)
async def get_video(
    file_name: str,
    service: LibraryServiceDep,
) -> StreamingResponse:
    """Stream a stored video."""
    return await _proxy(service, "video", file_name)
