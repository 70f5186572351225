"""Video upload endpoint."""

from typing import Annotated

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import PlainTextResponse

from vidhost.api.dependencies import IngestionServiceDep
from vidhost.application.dtos.ingestion import IngestVideoCommand

router = APIRouter()

UPLOAD_OK_MESSAGE = "Video and metadata uploaded successfully."


@router.post(
    "/upload_video",
    response_class=PlainTextResponse,
    summary="Upload a video",
    description=(
        "Store a video and its thumbnail (supplied or taken from the video) "
        "and add it to the catalog."
    ),
)
async def upload_video(
    request: Request,
    service: IngestionServiceDep,
    video_file: Annotated[UploadFile | None, File(alias="videoFile")] = None,
    thumbnail_file: Annotated[UploadFile | None, File(alias="thumbnailFile")] = None,
    video_title: Annotated[str, Form(alias="videoTitle")] = "",
    creator_name: Annotated[str, Form(alias="creatorName")] = "",
) -> PlainTextResponse:
    """Run the ingestion pipeline for one upload."""
    command = IngestVideoCommand(
        title=video_title,
        creator=creator_name,
        base_url=str(request.base_url),
    )
    await service.ingest(command, video_file, thumbnail_file)
    return PlainTextResponse(UPLOAD_OK_MESSAGE)
