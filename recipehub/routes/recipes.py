"""
RecipeHub Backend — Recipe Route Handlers
===========================================

What:  /api/recipes: CRUD, fork, image upload and like/unlike.
How:   Handlers resolve the acting user through `get_current_user_id`,
       hand everything to RecipeService and return its result. Errors are
       raised by the service and rendered by the global handlers.

Route order matters: /recipes/user/{user_id} is declared before
/recipes/{recipe_id} so "user" is never parsed as a recipe id.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import get_current_user_id
from recipehub.database import get_db_session
from recipehub.schemas.common import ErrorResponse, LikeEntry, MessageResponse
from recipehub.schemas.recipe import (
    ForkRequest,
    RecipeCreate,
    RecipeDetailResponse,
    RecipeResponse,
    RecipeUpdate,
)
from recipehub.services.recipe_service import recipe_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/recipes", tags=["Recipes"])

_errors = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the owner", "model": ErrorResponse},
    404: {"description": "Recipe not found", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=RecipeResponse,
    responses={k: _errors[k] for k in (400, 401, 404)},
    summary="Create a recipe",
    description="Creates a recipe owned by the caller. Supplying parentRecipe creates it as a fork.",
)
async def create_recipe(
    payload: RecipeCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.create_recipe(db, user_id, payload)


@router.get("", response_model=List[RecipeResponse], summary="List all recipes, newest first")
async def list_recipes(db: AsyncSession = Depends(get_db_session)) -> List[RecipeResponse]:
    return await recipe_service.list_recipes(db)


@router.get(
    "/user/{user_id}",
    response_model=List[RecipeResponse],
    summary="List one user's recipes, newest first",
)
async def list_user_recipes(
    user_id: UUID, db: AsyncSession = Depends(get_db_session)
) -> List[RecipeResponse]:
    return await recipe_service.list_recipes(db, owner_id=user_id)


@router.get(
    "/{recipe_id}",
    response_model=RecipeDetailResponse,
    responses={404: _errors[404]},
    summary="Get a recipe with its author and parent recipe",
)
async def get_recipe(
    recipe_id: UUID, db: AsyncSession = Depends(get_db_session)
) -> RecipeDetailResponse:
    return await recipe_service.get_recipe(db, recipe_id)


@router.put(
    "/{recipe_id}",
    response_model=RecipeResponse,
    responses=_errors,
    summary="Update a recipe",
    description="Merge patch: only fields present and non-null are changed.",
)
async def update_recipe(
    recipe_id: UUID,
    payload: RecipeUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.update_recipe(db, recipe_id, user_id, payload)


@router.delete(
    "/{recipe_id}",
    response_model=MessageResponse,
    responses={k: _errors[k] for k in (401, 403, 404)},
    summary="Delete a recipe and its comments",
)
async def delete_recipe(
    recipe_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await recipe_service.delete_recipe(db, recipe_id, user_id)
    return MessageResponse(msg="Recipe removed")


@router.post(
    "/{recipe_id}/fork",
    response_model=RecipeResponse,
    responses={k: _errors[k] for k in (401, 404)},
    summary="Fork a recipe",
    description="Copies the recipe's content into a new recipe owned by the caller.",
)
async def fork_recipe(
    recipe_id: UUID,
    payload: Optional[ForkRequest] = Body(default=None),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.fork_recipe(db, recipe_id, user_id, payload)


@router.post(
    "/{recipe_id}/image",
    response_model=RecipeResponse,
    responses=_errors,
    summary="Upload a recipe image",
    description="Multipart upload in the `image` field (png, jpg, jpeg, gif, webp).",
)
async def upload_image(
    recipe_id: UUID,
    image: Optional[UploadFile] = File(default=None),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    content = await image.read() if image is not None else None
    return await recipe_service.attach_image(
        db,
        recipe_id,
        user_id,
        filename=image.filename if image is not None else None,
        content=content,
        content_type=image.content_type if image is not None else None,
    )


@router.put(
    "/{recipe_id}/like",
    response_model=List[LikeEntry],
    summary="Like a recipe",
)
async def like_recipe(
    recipe_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeEntry]:
    return await recipe_service.like_recipe(db, recipe_id, user_id)


@router.put(
    "/{recipe_id}/unlike",
    response_model=List[LikeEntry],
    summary="Remove the caller's like from a recipe",
)
async def unlike_recipe(
    recipe_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeEntry]:
    return await recipe_service.unlike_recipe(db, recipe_id, user_id)
