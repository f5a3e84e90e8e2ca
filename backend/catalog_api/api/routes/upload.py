from typing import List

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from catalog_api.api.deps import require_capability
from catalog_api.core.security import Capability
from catalog_api.dependencies import get_media_service
from catalog_api.models.user import User
from catalog_api.schemas.common import MessageResponse
from catalog_api.schemas.media import MediaUploadResponse
from catalog_api.services.media_service import IncomingFile, MediaIntakeService

router = APIRouter()

require_uploader = require_capability(Capability.upload_media)


@router.post("/media", response_model=MediaUploadResponse)
async def upload_media(
    request: Request,
    media_service: MediaIntakeService = Depends(get_media_service),
    current_user: User = Depends(require_uploader),
) -> MediaUploadResponse:
    """
    Upload product media as multipart form data. Files go in the ``images``
    and ``videos`` fields. The returned URLs are what products store.
    """
    form = await request.form()
    try:
        uploads = [(name, value) for name, value in form.multi_items() if isinstance(value, UploadFile)]

        # Field, count, type and declared size are checked before any body is read
        media_service.check(
            [
                IncomingFile(
                    field_name=name,
                    content=b"",
                    content_type=value.content_type,
                    original_name=value.filename or "file",
                    size=value.size or 0,
                )
                for name, value in uploads
            ]
        )

        incoming: List[IncomingFile] = []
        for name, value in uploads:
            original_name = value.filename or "file"
            incoming.append(
                IncomingFile(
                    field_name=name,
                    content=await media_service.read_bounded(value, original_name),
                    content_type=value.content_type,
                    original_name=original_name,
                )
            )
    finally:
        await form.close()

    files = await media_service.ingest(incoming)
    return MediaUploadResponse(files=files)


@router.delete("/media/{field_name}/{filename}", response_model=MessageResponse)
async def delete_media(
    field_name: str,
    filename: str,
    media_service: MediaIntakeService = Depends(get_media_service),
    current_user: User = Depends(require_uploader),
) -> MessageResponse:
    await media_service.delete(field_name, filename)
    return MessageResponse(message="File deleted successfully")
