"""
RecipeHub Backend — Ownership & Authorization Guard
=====================================================

What:  Decides whether an authenticated user may act on an entity.
How:   Plain functions over already-loaded entities; they raise
       ForbiddenError instead of returning a flag so a failed check can
       never be ignored by the caller.

Rules:
    Recipe  (update, delete, image)  → owner only
    Folder  (update, delete, members) → owner only
    Folder  (read)                   → owner, or anyone when public
    Comment (update)                 → author only
    Comment (delete)                 → author OR owner of the parent recipe
"""

import logging
import uuid
from typing import Optional, Protocol

from recipehub.exceptions import ForbiddenError
from recipehub.models import Comment, Folder, Recipe

logger = logging.getLogger(__name__)


class Owned(Protocol):
    id: uuid.UUID
    user_id: uuid.UUID


def ensure_owner(entity: Owned, user_id: uuid.UUID, resource: str) -> None:
    if entity.user_id != user_id:
        logger.warning(
            "User %s denied mutation of %s %s owned by %s",
            user_id, resource, entity.id, entity.user_id,
        )
        raise ForbiddenError(
            context={"resource": resource, "resource_id": str(entity.id), "user_id": str(user_id)}
        )


def ensure_can_delete_comment(comment: Comment, recipe: Recipe, user_id: uuid.UUID) -> None:
    """The comment's author and the recipe's owner share the delete capability."""
    if comment.user_id == user_id or recipe.user_id == user_id:
        return
    logger.warning(
        "User %s denied deleting comment %s on recipe %s", user_id, comment.id, recipe.id
    )
    raise ForbiddenError(
        context={"resource": "comment", "resource_id": str(comment.id), "user_id": str(user_id)}
    )


def ensure_can_view_folder(folder: Folder, user_id: Optional[uuid.UUID]) -> None:
    if folder.is_public or folder.user_id == user_id:
        return
    raise ForbiddenError(
        message="Not authorized to view this folder",
        context={"resource": "folder", "resource_id": str(folder.id)},
    )
