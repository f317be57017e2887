"""
RecipeHub Backend — Recipe Service
====================================

What:  Business rules for recipes: creation (optionally as a fork), reads
       with author/parent joins, merge-patch updates, the fork engine,
       image attachment, like/unlike and the delete cascade.
Who:   Called by the /api/recipes route handlers.

Every mutating method receives the requesting user's id explicitly and
authorizes against the stored owner before touching the row.

Delete cascade:
    1. authorize (owner only)
    2. delete the recipe row
    3. delete every comment whose recipe_id matches
    Folders that list the recipe are left untouched (non-owning membership).
"""

import copy
import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import DatabaseError, NotFoundError, ValidationError
from recipehub.models import Comment, Recipe
from recipehub.schemas.common import LikeEntry, UserSummary
from recipehub.schemas.recipe import (
    ForkRequest,
    RecipeCreate,
    RecipeDetailResponse,
    RecipeResponse,
    RecipeUpdate,
)
from recipehub.services.authorization import ensure_owner
from recipehub.services.file_service import file_service
from recipehub.services.likes import add_like, remove_like
from recipehub.services.lookups import get_recipe_or_404, load_user_summaries

logger = logging.getLogger(__name__)

DEFAULT_FORK_MODIFICATIONS = "Forked recipe"


def to_recipe_response(recipe: Recipe, authors: Dict[uuid.UUID, UserSummary]) -> RecipeResponse:
    return RecipeResponse(
        id=recipe.id,
        user=authors.get(recipe.user_id) or UserSummary(id=recipe.user_id),
        title=recipe.title,
        description=recipe.description,
        ingredients=recipe.ingredients,
        instructions=recipe.instructions,
        cooking_time=recipe.cooking_time,
        servings=recipe.servings,
        image=recipe.image,
        tags=recipe.tags or [],
        parent_recipe=recipe.parent_recipe_id,
        is_forked=recipe.is_forked,
        modifications=recipe.modifications,
        likes=recipe.likes,
        date=recipe.created_at,
    )


class RecipeService:
    """
    Stateless; receives the session and the acting user on every call.

    Error Handling Strategy:
        Domain failures raise typed RecipeHubError subclasses that propagate
        unchanged. SQLAlchemy failures on list queries are wrapped in
        DatabaseError so no SQL detail reaches the client.
    """

    async def _respond(self, db: AsyncSession, recipe: Recipe) -> RecipeResponse:
        authors = await load_user_summaries(db, [recipe.user_id])
        return to_recipe_response(recipe, authors)

    async def _respond_many(self, db: AsyncSession, recipes: List[Recipe]) -> List[RecipeResponse]:
        authors = await load_user_summaries(db, (r.user_id for r in recipes))
        return [to_recipe_response(r, authors) for r in recipes]

    # ── Create ────────────────────────────────────────────────────────────

    async def create_recipe(
        self, db: AsyncSession, user_id: uuid.UUID, payload: RecipeCreate
    ) -> RecipeResponse:
        """
        Create a recipe owned by `user_id`.

        When `parentRecipe` is given the parent must exist; the new recipe is
        then marked as a fork and keeps `modifications` only if supplied.

        Raises:
            NotFoundError: parentRecipe does not resolve
        """
        recipe = Recipe(
            user_id=user_id,
            title=payload.title,
            description=payload.description,
            ingredients=[i.model_dump() for i in payload.ingredients],
            instructions=[i.model_dump() for i in payload.instructions],
            cooking_time=payload.cooking_time,
            servings=payload.servings,
            image=payload.image,
            tags=payload.tags or [],
            is_forked=False,
            likes=[],
        )

        if payload.parent_recipe is not None:
            parent = await db.get(Recipe, payload.parent_recipe)
            if parent is None:
                raise NotFoundError(resource="parent recipe", resource_id=str(payload.parent_recipe))
            recipe.parent_recipe_id = parent.id
            recipe.is_forked = True
            recipe.modifications = payload.modifications or None

        db.add(recipe)
        await db.flush()
        logger.info("Recipe %s created by user %s (forked=%s)", recipe.id, user_id, recipe.is_forked)
        return await self._respond(db, recipe)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_recipes(
        self, db: AsyncSession, owner_id: Optional[uuid.UUID] = None
    ) -> List[RecipeResponse]:
        """All recipes (or one user's), newest first, with authors inlined."""
        try:
            query = select(Recipe).order_by(Recipe.created_at.desc())
            if owner_id is not None:
                query = query.where(Recipe.user_id == owner_id)
            result = await db.execute(query)
            recipes = list(result.scalars().all())
            return await self._respond_many(db, recipes)
        except SQLAlchemyError as e:
            logger.error("Database error listing recipes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve recipes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_recipe(self, db: AsyncSession, recipe_id: uuid.UUID) -> RecipeDetailResponse:
        """One recipe with its author and its parent recipe (if any) inlined."""
        recipe = await get_recipe_or_404(db, recipe_id)

        parent: Optional[Recipe] = None
        if recipe.parent_recipe_id is not None:
            parent = await db.get(Recipe, recipe.parent_recipe_id)

        authors = await load_user_summaries(
            db, [recipe.user_id] + ([parent.user_id] if parent else [])
        )
        base = to_recipe_response(recipe, authors)
        return RecipeDetailResponse(
            **base.model_dump(exclude={"parent_recipe"}),
            parent_recipe=to_recipe_response(parent, authors) if parent else None,
        )

    # ── Update ────────────────────────────────────────────────────────────

    async def update_recipe(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: RecipeUpdate,
    ) -> RecipeResponse:
        """Apply a merge patch: only fields present and non-null are written."""
        recipe = await get_recipe_or_404(db, recipe_id)
        ensure_owner(recipe, user_id, "recipe")

        changes = payload.model_dump(exclude_none=True)
        for field, value in changes.items():
            setattr(recipe, field, value)

        await db.flush()
        logger.info("Recipe %s updated fields %s", recipe.id, sorted(changes))
        return await self._respond(db, recipe)

    # ── Delete (cascade) ──────────────────────────────────────────────────

    async def delete_recipe(
        self, db: AsyncSession, recipe_id: uuid.UUID, user_id: uuid.UUID
    ) -> int:
        """
        Delete a recipe, then every comment attached to it.

        Returns:
            Number of comments removed by the cascade.
        """
        recipe = await get_recipe_or_404(db, recipe_id)
        ensure_owner(recipe, user_id, "recipe")

        await db.delete(recipe)
        await db.flush()

        result = await db.execute(delete(Comment).where(Comment.recipe_id == recipe_id))
        removed = result.rowcount or 0

        # TODO: prune this recipe id from folders.recipes; membership currently dangles
        logger.info("Recipe %s deleted with %d comment(s)", recipe_id, removed)
        return removed

    # ── Fork engine ───────────────────────────────────────────────────────

    async def fork_recipe(
        self,
        db: AsyncSession,
        source_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: Optional[ForkRequest] = None,
    ) -> RecipeResponse:
        """
        Copy a recipe's content into a new recipe owned by `user_id`.

        Copied verbatim: title, description, ingredients, instructions,
        cookingTime, servings, image, tags. Likes are not copied. The source
        row is only read. Forks of forks go through the same path.
        """
        source = await get_recipe_or_404(db, source_id)
        modifications = payload.modifications if payload else None

        fork = Recipe(
            user_id=user_id,
            title=source.title,
            description=source.description,
            ingredients=copy.deepcopy(source.ingredients),
            instructions=copy.deepcopy(source.instructions),
            cooking_time=source.cooking_time,
            servings=source.servings,
            image=source.image,
            tags=list(source.tags or []),
            parent_recipe_id=source.id,
            is_forked=True,
            modifications=modifications or DEFAULT_FORK_MODIFICATIONS,
            likes=[],
        )
        db.add(fork)
        await db.flush()

        logger.info("Recipe %s forked from %s by user %s", fork.id, source.id, user_id)
        return await self._respond(db, fork)

    # ── Image ─────────────────────────────────────────────────────────────

    async def attach_image(
        self,
        db: AsyncSession,
        recipe_id: uuid.UUID,
        user_id: uuid.UUID,
        filename: Optional[str],
        content: Optional[bytes],
        content_type: Optional[str] = None,
    ) -> RecipeResponse:
        """
        Store an uploaded image and point the recipe at it.

        Checks run in order: recipe exists, requester owns it, a file was sent.
        """
        recipe = await get_recipe_or_404(db, recipe_id)
        ensure_owner(recipe, user_id, "recipe")

        if not filename or content is None:
            raise ValidationError(message="No file uploaded", field="image")

        public_path = await file_service.validate_and_store(
            filename=filename, content=content, content_type=content_type
        )
        recipe.image = public_path
        try:
            await db.flush()
        except SQLAlchemyError:
            await file_service.cleanup_file(public_path)
            raise

        logger.info("Recipe %s image set to %s", recipe.id, public_path)
        return await self._respond(db, recipe)

    # ── Likes ─────────────────────────────────────────────────────────────

    async def like_recipe(
        self, db: AsyncSession, recipe_id: uuid.UUID, user_id: uuid.UUID
    ) -> List[LikeEntry]:
        recipe = await get_recipe_or_404(db, recipe_id)
        recipe.likes = add_like(recipe.likes, user_id, "recipe")
        await db.flush()
        return [LikeEntry.model_validate(like) for like in recipe.likes]

    async def unlike_recipe(
        self, db: AsyncSession, recipe_id: uuid.UUID, user_id: uuid.UUID
    ) -> List[LikeEntry]:
        recipe = await get_recipe_or_404(db, recipe_id)
        recipe.likes = remove_like(recipe.likes, user_id, "recipe")
        await db.flush()
        return [LikeEntry.model_validate(like) for like in recipe.likes]


recipe_service = RecipeService()
