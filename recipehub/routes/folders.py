"""
RecipeHub Backend — Folder Route Handlers
===========================================

What:  /api/folders: folder CRUD, membership and the public folder feed.

/folders/public/all is declared before /folders/{folder_id}.
GET /folders/{folder_id} accepts anonymous callers; private folders are
only visible to their owner.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import get_current_user_id, get_optional_user_id
from recipehub.database import get_db_session
from recipehub.schemas.common import ErrorResponse, MessageResponse
from recipehub.schemas.folder import (
    FolderCreate,
    FolderDetailResponse,
    FolderResponse,
    FolderUpdate,
    PublicFolderResponse,
)
from recipehub.services.folder_service import folder_service

router = APIRouter(prefix="/api/folders", tags=["Folders"])

_errors = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the owner", "model": ErrorResponse},
    404: {"description": "Folder or recipe not found", "model": ErrorResponse},
    409: {"description": "Membership conflict", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=FolderResponse,
    responses={401: _errors[401]},
    summary="Create a folder",
)
async def create_folder(
    payload: FolderCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FolderResponse:
    return await folder_service.create_folder(db, user_id, payload)


@router.get(
    "",
    response_model=List[FolderResponse],
    responses={401: _errors[401]},
    summary="List the caller's folders, newest first",
)
async def list_own_folders(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[FolderResponse]:
    return await folder_service.list_own_folders(db, user_id)


@router.get(
    "/public/all",
    response_model=List[PublicFolderResponse],
    summary="List every public folder with its owner",
)
async def list_public_folders(
    db: AsyncSession = Depends(get_db_session),
) -> List[PublicFolderResponse]:
    return await folder_service.list_public_folders(db)


@router.get(
    "/{folder_id}",
    response_model=FolderDetailResponse,
    responses={k: _errors[k] for k in (401, 403, 404)},
    summary="Get a folder with its recipes",
)
async def get_folder(
    folder_id: UUID,
    user_id: Optional[UUID] = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FolderDetailResponse:
    return await folder_service.get_folder(db, folder_id, user_id)


@router.put(
    "/{folder_id}",
    response_model=FolderResponse,
    responses={k: _errors[k] for k in (401, 403, 404)},
    summary="Update a folder",
)
async def update_folder(
    folder_id: UUID,
    payload: FolderUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FolderResponse:
    return await folder_service.update_folder(db, folder_id, user_id, payload)


@router.delete(
    "/{folder_id}",
    response_model=MessageResponse,
    responses={k: _errors[k] for k in (401, 403, 404)},
    summary="Delete a folder",
)
async def delete_folder(
    folder_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await folder_service.delete_folder(db, folder_id, user_id)
    return MessageResponse(msg="Folder removed")


@router.put(
    "/{folder_id}/recipes/{recipe_id}",
    response_model=FolderResponse,
    responses=_errors,
    summary="Add a recipe to a folder",
)
async def add_recipe_to_folder(
    folder_id: UUID,
    recipe_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FolderResponse:
    return await folder_service.add_recipe(db, folder_id, recipe_id, user_id)


@router.delete(
    "/{folder_id}/recipes/{recipe_id}",
    response_model=FolderResponse,
    responses=_errors,
    summary="Remove a recipe from a folder",
)
async def remove_recipe_from_folder(
    folder_id: UUID,
    recipe_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FolderResponse:
    return await folder_service.remove_recipe(db, folder_id, recipe_id, user_id)
