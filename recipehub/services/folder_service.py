"""
RecipeHub Backend — Folder Service
====================================

What:  Folder CRUD plus the membership manager that keeps `folder.recipes`
       free of duplicates.
How:   Membership is a list of recipe id strings on the folder row. Adding
       or removing a recipe rewrites that list in a single-row update.

Known gap:
    Deleting a recipe does not remove it from folders. Detail reads skip ids
    that no longer resolve and log them; the stored list is left as is.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import AlreadyMemberError, DatabaseError, NotMemberError
from recipehub.models import Folder, Recipe
from recipehub.schemas.common import UserSummary
from recipehub.schemas.folder import (
    FolderCreate,
    FolderDetailResponse,
    FolderRecipeSummary,
    FolderResponse,
    FolderUpdate,
    PublicFolderResponse,
)
from recipehub.services.authorization import ensure_can_view_folder, ensure_owner
from recipehub.services.lookups import (
    get_folder_or_404,
    get_recipe_or_404,
    load_user_summaries,
)

logger = logging.getLogger(__name__)


def to_folder_response(folder: Folder) -> FolderResponse:
    return FolderResponse(
        id=folder.id,
        user=folder.user_id,
        name=folder.name,
        description=folder.description,
        is_public=folder.is_public,
        recipes=folder.recipes,
        date=folder.created_at,
    )


class FolderService:

    async def create_folder(
        self, db: AsyncSession, user_id: uuid.UUID, payload: FolderCreate
    ) -> FolderResponse:
        folder = Folder(
            user_id=user_id,
            name=payload.name,
            description=payload.description,
            is_public=payload.is_public,
            recipes=[],
        )
        db.add(folder)
        await db.flush()
        logger.info("Folder %s created by user %s", folder.id, user_id)
        return to_folder_response(folder)

    async def list_own_folders(self, db: AsyncSession, user_id: uuid.UUID) -> List[FolderResponse]:
        try:
            result = await db.execute(
                select(Folder)
                .where(Folder.user_id == user_id)
                .order_by(Folder.created_at.desc())
            )
            return [to_folder_response(f) for f in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing folders for %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve folders. Please try again.")

    async def list_public_folders(self, db: AsyncSession) -> List[PublicFolderResponse]:
        """Every public folder, newest first, with its owner inlined."""
        try:
            result = await db.execute(
                select(Folder)
                .where(Folder.is_public.is_(True))
                .order_by(Folder.created_at.desc())
            )
            folders = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing public folders: %s", str(e))
            raise DatabaseError(message="Could not retrieve folders. Please try again.")

        owners = await load_user_summaries(db, (f.user_id for f in folders))
        return [
            PublicFolderResponse(
                **to_folder_response(f).model_dump(exclude={"user"}),
                user=owners.get(f.user_id) or UserSummary(id=f.user_id),
            )
            for f in folders
        ]

    async def get_folder(
        self, db: AsyncSession, folder_id: uuid.UUID, user_id: Optional[uuid.UUID]
    ) -> FolderDetailResponse:
        """
        A folder with its recipes inlined, visible to its owner or, when
        public, to anyone. Recipes are returned in membership order.
        """
        folder = await get_folder_or_404(db, folder_id)
        ensure_can_view_folder(folder, user_id)

        member_ids = [uuid.UUID(rid) for rid in folder.recipes]
        recipes_by_id = {}
        if member_ids:
            result = await db.execute(select(Recipe).where(Recipe.id.in_(member_ids)))
            recipes_by_id = {r.id: r for r in result.scalars().all()}

        dangling = [rid for rid in member_ids if rid not in recipes_by_id]
        if dangling:
            logger.warning(
                "Folder %s references %d deleted recipe(s): %s",
                folder.id, len(dangling), ", ".join(str(d) for d in dangling),
            )

        members = [recipes_by_id[rid] for rid in member_ids if rid in recipes_by_id]
        authors = await load_user_summaries(db, (r.user_id for r in members))

        return FolderDetailResponse(
            **to_folder_response(folder).model_dump(exclude={"recipes"}),
            recipes=[
                FolderRecipeSummary(
                    id=r.id,
                    title=r.title,
                    description=r.description,
                    image=r.image,
                    date=r.created_at,
                    user=authors.get(r.user_id) or UserSummary(id=r.user_id),
                )
                for r in members
            ],
        )

    async def update_folder(
        self,
        db: AsyncSession,
        folder_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: FolderUpdate,
    ) -> FolderResponse:
        folder = await get_folder_or_404(db, folder_id)
        ensure_owner(folder, user_id, "folder")

        sent = payload.model_dump(exclude_unset=True)
        if sent.get("name"):
            folder.name = sent["name"]
        if "description" in sent:
            folder.description = sent["description"]
        if sent.get("is_public") is not None:
            folder.is_public = sent["is_public"]

        await db.flush()
        return to_folder_response(folder)

    async def delete_folder(
        self, db: AsyncSession, folder_id: uuid.UUID, user_id: uuid.UUID
    ) -> None:
        """Removes the folder row only; member recipes are not touched."""
        folder = await get_folder_or_404(db, folder_id)
        ensure_owner(folder, user_id, "folder")

        await db.delete(folder)
        await db.flush()
        logger.info("Folder %s deleted by user %s", folder_id, user_id)

    # ── Membership ────────────────────────────────────────────────────────

    async def add_recipe(
        self,
        db: AsyncSession,
        folder_id: uuid.UUID,
        recipe_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> FolderResponse:
        folder = await get_folder_or_404(db, folder_id)
        await get_recipe_or_404(db, recipe_id)
        ensure_owner(folder, user_id, "folder")

        rid = str(recipe_id)
        if rid in folder.recipes:
            raise AlreadyMemberError(context={"folder_id": str(folder_id), "recipe_id": rid})

        folder.recipes = [*folder.recipes, rid]
        await db.flush()
        return to_folder_response(folder)

    async def remove_recipe(
        self,
        db: AsyncSession,
        folder_id: uuid.UUID,
        recipe_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> FolderResponse:
        """The recipe itself need not exist any more, so dangling ids can be removed."""
        folder = await get_folder_or_404(db, folder_id)
        ensure_owner(folder, user_id, "folder")

        rid = str(recipe_id)
        if rid not in folder.recipes:
            raise NotMemberError(context={"folder_id": str(folder_id), "recipe_id": rid})

        folder.recipes = [r for r in folder.recipes if r != rid]
        await db.flush()
        return to_folder_response(folder)


folder_service = FolderService()
