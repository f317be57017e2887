"""
RecipeHub Backend — Comment Service
=====================================

What:  Comments addressed by the composite key (recipeId, commentId).
How:   Every single-comment operation first resolves the comment and checks
       that its stored recipe matches the recipe in the path. A mismatch is
       a ReferenceMismatchError (client error), not a 404: both ids exist,
       they just don't belong together.

Authorization:
    update → author only
    delete → author, or the owner of the recipe the comment is on
"""

import logging
import uuid
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import DatabaseError, ReferenceMismatchError
from recipehub.models import Comment
from recipehub.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from recipehub.schemas.common import LikeEntry, UserSummary
from recipehub.services.authorization import ensure_can_delete_comment, ensure_owner
from recipehub.services.likes import add_like, remove_like
from recipehub.services.lookups import (
    get_comment_or_404,
    get_recipe_or_404,
    get_user_or_404,
    load_user_summaries,
)

logger = logging.getLogger(__name__)


def to_comment_response(comment: Comment, authors: Dict[uuid.UUID, UserSummary]) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        user=authors.get(comment.user_id) or UserSummary(id=comment.user_id),
        recipe=comment.recipe_id,
        text=comment.text,
        name=comment.name,
        avatar=comment.avatar,
        likes=comment.likes,
        date=comment.created_at,
    )


class CommentService:

    async def _respond(self, db: AsyncSession, comment: Comment) -> CommentResponse:
        authors = await load_user_summaries(db, [comment.user_id])
        return to_comment_response(comment, authors)

    async def _get_attached(
        self, db: AsyncSession, recipe_id: uuid.UUID, comment_id: uuid.UUID
    ) -> Comment:
        """Load a comment and verify it is attached to `recipe_id`."""
        comment = await get_comment_or_404(db, comment_id)
        if comment.recipe_id != recipe_id:
            logger.warning(
                "Comment %s addressed under recipe %s but belongs to %s",
                comment_id, recipe_id, comment.recipe_id,
            )
            raise ReferenceMismatchError(
                context={"comment_id": str(comment_id), "recipe_id": str(recipe_id)}
            )
        return comment

    async def create_comment(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: CommentCreate,
    ) -> CommentResponse:
        """Attach a comment to an existing recipe, snapshotting the author's name/avatar."""
        recipe = await get_recipe_or_404(db, recipe_id)
        author = await get_user_or_404(db, user_id)

        comment = Comment(
            user_id=author.id,
            recipe_id=recipe.id,
            text=payload.text,
            name=author.name,
            avatar=author.avatar,
            likes=[],
        )
        db.add(comment)
        await db.flush()
        logger.info("Comment %s added to recipe %s by user %s", comment.id, recipe.id, user_id)
        return await self._respond(db, comment)

    async def list_comments(self, db: AsyncSession, recipe_id: uuid.UUID) -> List[CommentResponse]:
        """Comments on a recipe, newest first."""
        await get_recipe_or_404(db, recipe_id)
        try:
            result = await db.execute(
                select(Comment)
                .where(Comment.recipe_id == recipe_id)
                .order_by(Comment.created_at.desc())
            )
            comments = result.scalars().all()
            authors = await load_user_summaries(db, (c.user_id for c in comments))
        except SQLAlchemyError as e:
            logger.error("Database error listing comments for %s: %s", recipe_id, str(e))
            raise DatabaseError(
                message="Could not retrieve comments. Please try again.",
                context={"recipe_id": str(recipe_id)},
            )
        return [to_comment_response(c, authors) for c in comments]

    async def get_comment(
        self, db: AsyncSession, recipe_id: uuid.UUID, comment_id: uuid.UUID
    ) -> CommentResponse:
        comment = await self._get_attached(db, recipe_id, comment_id)
        return await self._respond(db, comment)

    async def update_comment(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        comment_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: CommentUpdate,
    ) -> CommentResponse:
        comment = await self._get_attached(db, recipe_id, comment_id)
        ensure_owner(comment, user_id, "comment")

        comment.text = payload.text
        await db.flush()
        return await self._respond(db, comment)

    async def delete_comment(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        comment_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> None:
        """Delete one comment. Both the comment and its recipe must still exist."""
        comment = await get_comment_or_404(db, comment_id)
        recipe = await get_recipe_or_404(db, recipe_id)
        if comment.recipe_id != recipe.id:
            raise ReferenceMismatchError(
                context={"comment_id": str(comment_id), "recipe_id": str(recipe_id)}
            )
        ensure_can_delete_comment(comment, recipe, user_id)

        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s on recipe %s deleted by user %s", comment_id, recipe_id, user_id)

    async def like_comment(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        comment_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> List[LikeEntry]:
        comment = await self._get_attached(db, recipe_id, comment_id)
        comment.likes = add_like(comment.likes, user_id, "comment")
        await db.flush()
        return [LikeEntry.model_validate(like) for like in comment.likes]

    async def unlike_comment(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        comment_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> List[LikeEntry]:
        comment = await self._get_attached(db, recipe_id, comment_id)
        comment.likes = remove_like(comment.likes, user_id, "comment")
        await db.flush()
        return [LikeEntry.model_validate(like) for like in comment.likes]


comment_service = CommentService()
