"""
RecipeHub Backend — Uploaded Image Serving
============================================

What:  GET /uploads/{path}: serves images stored by FileService.
How:   The path is resolved inside STORAGE_ROOT (anything escaping it is a
       400) and streamed with FileResponse, which infers the media type
       from the extension.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from recipehub.exceptions import NotFoundError
from recipehub.schemas.common import ErrorResponse
from recipehub.services.file_service import PUBLIC_PREFIX, file_service

router = APIRouter(prefix=PUBLIC_PREFIX, tags=["Uploads"])


@router.get(
    "/{file_path:path}",
    summary="Serve an uploaded recipe image",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_upload(file_path: str) -> FileResponse:
    full_path = file_service.resolve_public_path(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    # Stored names are random, so a file at a given path never changes
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
