"""
RecipeHub Backend — Entity Lookups & Read-side Joins
======================================================

What:  Loads entities by id (turning a missing row into NotFoundError) and
       resolves author summaries in one batched query.
Who:   Used by every resource service.

Joins are explicit: a listing loads its rows, collects the distinct user
ids, then fetches those users with a single `WHERE id IN (...)`.
"""

import uuid
from typing import Dict, Iterable, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.database import Base
from recipehub.exceptions import NotFoundError
from recipehub.models import Comment, Folder, Recipe, User
from recipehub.schemas.common import UserSummary

ModelT = TypeVar("ModelT", bound=Base)


async def fetch_or_404(
    db: AsyncSession, model: Type[ModelT], entity_id: uuid.UUID, resource: str
) -> ModelT:
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(resource=resource, resource_id=str(entity_id))
    return entity


async def get_recipe_or_404(db: AsyncSession, recipe_id: uuid.UUID) -> Recipe:
    return await fetch_or_404(db, Recipe, recipe_id, "recipe")


async def get_comment_or_404(db: AsyncSession, comment_id: uuid.UUID) -> Comment:
    return await fetch_or_404(db, Comment, comment_id, "comment")


async def get_folder_or_404(db: AsyncSession, folder_id: uuid.UUID) -> Folder:
    return await fetch_or_404(db, Folder, folder_id, "folder")


async def get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    return await fetch_or_404(db, User, user_id, "user")


async def load_user_summaries(
    db: AsyncSession, user_ids: Iterable[uuid.UUID]
) -> Dict[uuid.UUID, UserSummary]:
    """
    Batch-resolve users to {id, name, avatar}.

    Ids with no user row map to a summary carrying only the id.
    """
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    found = {
        user.id: UserSummary(id=user.id, name=user.name, avatar=user.avatar)
        for user in result.scalars().all()
    }
    return {uid: found.get(uid, UserSummary(id=uid)) for uid in ids}
