"""
RecipeHub Backend — Like/Unlike Toggle
========================================

What:  Maintains a likes list where each user appears at most once.
Who:   Shared by RecipeService and CommentService.

Algorithm:
    like:   scan for the user → present: AlreadyLikedError, no change
                              → absent:  prepend {"user": id} (most recent first)
    unlike: scan for the user → absent:  NotYetLikedError, no change
                              → present: drop EVERY entry for that user

Both functions return a new list; callers assign it back to the entity so
the JSON column is marked dirty. Two concurrent likes from one user can both
pass the scan before either commits; unlike's remove-all is what cleans up
such a duplicate.
"""

import uuid
from typing import Dict, List

from recipehub.exceptions import AlreadyLikedError, NotYetLikedError

Likes = List[Dict[str, str]]


def has_liked(likes: Likes, user_id: uuid.UUID) -> bool:
    uid = str(user_id)
    return any(like.get("user") == uid for like in likes)


def add_like(likes: Likes, user_id: uuid.UUID, resource: str = "recipe") -> Likes:
    if has_liked(likes, user_id):
        raise AlreadyLikedError(resource, context={"user_id": str(user_id)})
    return [{"user": str(user_id)}, *likes]


def remove_like(likes: Likes, user_id: uuid.UUID, resource: str = "recipe") -> Likes:
    if not has_liked(likes, user_id):
        raise NotYetLikedError(resource, context={"user_id": str(user_id)})
    uid = str(user_id)
    return [like for like in likes if like.get("user") != uid]
