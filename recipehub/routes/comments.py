"""
RecipeHub Backend — Comment Route Handlers
============================================

What:  /api/comments/{recipe_id}[/{comment_id}]. A comment is always
       addressed together with the recipe it belongs to; CommentService
       rejects pairs that don't match.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import get_current_user_id
from recipehub.database import get_db_session
from recipehub.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from recipehub.schemas.common import ErrorResponse, LikeEntry, MessageResponse
from recipehub.services.comment_service import comment_service

router = APIRouter(prefix="/api/comments", tags=["Comments"])

_errors = {
    400: {"description": "Invalid input or comment/recipe mismatch", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed", "model": ErrorResponse},
    404: {"description": "Recipe or comment not found", "model": ErrorResponse},
}


@router.post(
    "/{recipe_id}",
    response_model=CommentResponse,
    responses={k: _errors[k] for k in (400, 401, 404)},
    summary="Comment on a recipe",
)
async def create_comment(
    recipe_id: UUID,
    payload: CommentCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(db, recipe_id, user_id, payload)


@router.get(
    "/{recipe_id}",
    response_model=List[CommentResponse],
    responses={404: _errors[404]},
    summary="List a recipe's comments, newest first",
)
async def list_comments(
    recipe_id: UUID, db: AsyncSession = Depends(get_db_session)
) -> List[CommentResponse]:
    return await comment_service.list_comments(db, recipe_id)


@router.get(
    "/{recipe_id}/{comment_id}",
    response_model=CommentResponse,
    responses={k: _errors[k] for k in (400, 404)},
    summary="Get one comment",
)
async def get_comment(
    recipe_id: UUID, comment_id: UUID, db: AsyncSession = Depends(get_db_session)
) -> CommentResponse:
    return await comment_service.get_comment(db, recipe_id, comment_id)


@router.put(
    "/{recipe_id}/{comment_id}",
    response_model=CommentResponse,
    responses=_errors,
    summary="Edit a comment (author only)",
)
async def update_comment(
    recipe_id: UUID,
    comment_id: UUID,
    payload: CommentUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(db, recipe_id, comment_id, user_id, payload)


@router.delete(
    "/{recipe_id}/{comment_id}",
    response_model=MessageResponse,
    responses=_errors,
    summary="Delete a comment (author or recipe owner)",
)
async def delete_comment(
    recipe_id: UUID,
    comment_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await comment_service.delete_comment(db, recipe_id, comment_id, user_id)
    return MessageResponse(msg="Comment removed")


@router.put(
    "/{recipe_id}/{comment_id}/like",
    response_model=List[LikeEntry],
    summary="Like a comment",
)
async def like_comment(
    recipe_id: UUID,
    comment_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeEntry]:
    return await comment_service.like_comment(db, recipe_id, comment_id, user_id)


@router.put(
    "/{recipe_id}/{comment_id}/unlike",
    response_model=List[LikeEntry],
    summary="Remove the caller's like from a comment",
)
async def unlike_comment(
    recipe_id: UUID,
    comment_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[LikeEntry]:
    return await comment_service.unlike_comment(db, recipe_id, comment_id, user_id)
