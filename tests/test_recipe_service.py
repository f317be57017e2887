"""
RecipeHub Backend — Recipe Service Tests
==========================================

What:  Creation, fork lineage, merge-patch updates, ownership and the
       delete cascade, against a real (in-memory SQLite) database.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from recipehub.exceptions import AlreadyLikedError, ForbiddenError, NotFoundError, ValidationError
from recipehub.models import Comment, Recipe
from recipehub.schemas.recipe import ForkRequest, RecipeCreate, RecipeUpdate
from recipehub.services.recipe_service import DEFAULT_FORK_MODIFICATIONS, recipe_service


async def _create(db, user, recipe_data, **overrides):
    payload = RecipeCreate.model_validate({**recipe_data, **overrides})
    return await recipe_service.create_recipe(db, user.id, payload)


class TestCreateRecipe:

    @pytest.mark.asyncio
    async def test_create_soup(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        assert recipe.title == "Soup"
        assert recipe.cooking_time == 20
        assert recipe.servings == 2
        assert recipe.is_forked is False
        assert recipe.parent_recipe is None
        assert recipe.likes == []
        assert recipe.user.id == users.alice.id
        assert recipe.user.name == "Alice"

    @pytest.mark.asyncio
    async def test_create_with_parent_marks_fork(self, db_session, users, recipe_data):
        parent = await _create(db_session, users.alice, recipe_data)
        child = await _create(
            db_session, users.bob, recipe_data,
            parentRecipe=str(parent.id), modifications="Extra pepper",
        )

        assert child.is_forked is True
        assert child.parent_recipe == parent.id
        assert child.modifications == "Extra pepper"

    @pytest.mark.asyncio
    async def test_create_with_parent_drops_empty_modifications(self, db_session, users, recipe_data):
        parent = await _create(db_session, users.alice, recipe_data)
        child = await _create(
            db_session, users.bob, recipe_data, parentRecipe=str(parent.id), modifications="",
        )

        assert child.is_forked is True
        assert child.modifications is None

    @pytest.mark.asyncio
    async def test_create_with_missing_parent(self, db_session, users, recipe_data):
        with pytest.raises(NotFoundError, match="Parent recipe not found"):
            await _create(db_session, users.alice, recipe_data, parentRecipe=str(uuid4()))

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session, users):
        now = datetime.now(timezone.utc)
        for offset, title in ((2, "Oldest"), (0, "Newest"), (1, "Middle")):
            db_session.add(Recipe(
                user_id=users.alice.id, title=title, description="d",
                ingredients=[{"name": "x", "quantity": "1"}],
                instructions=[{"step": 1, "text": "t"}],
                cooking_time=1, servings=1, tags=[], likes=[],
                created_at=now - timedelta(minutes=offset),
            ))
        await db_session.flush()

        listed = await recipe_service.list_recipes(db_session)
        assert [r.title for r in listed] == ["Newest", "Middle", "Oldest"]

    @pytest.mark.asyncio
    async def test_list_by_owner(self, db_session, users, recipe_data):
        await _create(db_session, users.alice, recipe_data)
        await _create(db_session, users.bob, recipe_data, title="Stew")

        listed = await recipe_service.list_recipes(db_session, owner_id=users.bob.id)
        assert [r.title for r in listed] == ["Stew"]


class TestForkEngine:

    @pytest.mark.asyncio
    async def test_fork_defaults_modifications(self, db_session, users, recipe_data):
        source = await _create(db_session, users.alice, recipe_data)

        fork = await recipe_service.fork_recipe(db_session, source.id, users.bob.id)

        assert fork.modifications == DEFAULT_FORK_MODIFICATIONS == "Forked recipe"
        assert fork.is_forked is True
        assert fork.parent_recipe == source.id
        assert fork.user.id == users.bob.id

    @pytest.mark.asyncio
    async def test_fork_copies_content_not_likes(self, db_session, users, recipe_data):
        source = await _create(db_session, users.alice, recipe_data, image="/uploads/a.png")
        await recipe_service.like_recipe(db_session, source.id, users.carol.id)

        fork = await recipe_service.fork_recipe(
            db_session, source.id, users.bob.id, ForkRequest(modifications="Less salt")
        )

        assert fork.title == source.title
        assert fork.description == source.description
        assert fork.ingredients == source.ingredients
        assert fork.instructions == source.instructions
        assert fork.image == "/uploads/a.png"
        assert fork.tags == ["vegetarian"]
        assert fork.modifications == "Less salt"
        assert fork.likes == []

    @pytest.mark.asyncio
    async def test_fork_leaves_source_untouched(self, db_session, users, recipe_data):
        source = await _create(db_session, users.alice, recipe_data)
        await recipe_service.fork_recipe(db_session, source.id, users.bob.id)

        reread = await recipe_service.get_recipe(db_session, source.id)
        assert reread.is_forked is False
        assert reread.user.id == users.alice.id

    @pytest.mark.asyncio
    async def test_forking_twice_gives_two_recipes(self, db_session, users, recipe_data):
        source = await _create(db_session, users.alice, recipe_data)
        await recipe_service.like_recipe(db_session, source.id, users.carol.id)

        a = await recipe_service.fork_recipe(db_session, source.id, users.bob.id)
        b = await recipe_service.fork_recipe(db_session, source.id, users.bob.id)

        assert a.id != b.id
        assert a.likes == b.likes == []
        assert a.parent_recipe == b.parent_recipe == source.id
        reread = await recipe_service.get_recipe(db_session, source.id)
        assert [like.user for like in reread.likes] == [users.carol.id]

    @pytest.mark.asyncio
    async def test_fork_of_fork(self, db_session, users, recipe_data):
        original = await _create(db_session, users.alice, recipe_data)
        first = await recipe_service.fork_recipe(db_session, original.id, users.bob.id)
        second = await recipe_service.fork_recipe(db_session, first.id, users.carol.id)

        assert second.parent_recipe == first.id
        detail = await recipe_service.get_recipe(db_session, second.id)
        assert detail.parent_recipe.id == first.id
        assert detail.parent_recipe.user.name == "Bob"

    @pytest.mark.asyncio
    async def test_fork_missing_source(self, db_session, users):
        with pytest.raises(NotFoundError, match="Recipe not found"):
            await recipe_service.fork_recipe(db_session, uuid4(), users.bob.id)


class TestUpdateRecipe:

    @pytest.mark.asyncio
    async def test_merge_patch_keeps_unspecified_fields(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        updated = await recipe_service.update_recipe(
            db_session, recipe.id, users.alice.id, RecipeUpdate(servings=4)
        )

        assert updated.servings == 4
        assert updated.title == "Soup"
        assert updated.cooking_time == 20
        assert updated.ingredients == recipe.ingredients

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        with pytest.raises(ForbiddenError):
            await recipe_service.update_recipe(
                db_session, recipe.id, users.bob.id, RecipeUpdate(title="Mine now")
            )

        reread = await recipe_service.get_recipe(db_session, recipe.id)
        assert reread.title == "Soup"

    @pytest.mark.asyncio
    async def test_update_missing_recipe(self, db_session, users):
        with pytest.raises(NotFoundError):
            await recipe_service.update_recipe(
                db_session, uuid4(), users.alice.id, RecipeUpdate(title="x")
            )


class TestDeleteCascade:

    @pytest.mark.asyncio
    async def test_delete_removes_only_its_comments(self, db_session, users, recipe_data):
        doomed = await _create(db_session, users.alice, recipe_data)
        survivor = await _create(db_session, users.alice, recipe_data, title="Stew")
        for recipe_id in (doomed.id, doomed.id, survivor.id):
            db_session.add(Comment(user_id=users.bob.id, recipe_id=recipe_id, text="Nice", likes=[]))
        await db_session.flush()

        removed = await recipe_service.delete_recipe(db_session, doomed.id, users.alice.id)

        assert removed == 2
        assert await db_session.get(Recipe, doomed.id) is None
        remaining = await db_session.execute(
            select(Comment.recipe_id, func.count()).group_by(Comment.recipe_id)
        )
        assert dict(remaining.all()) == {survivor.id: 1}

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        with pytest.raises(ForbiddenError):
            await recipe_service.delete_recipe(db_session, recipe.id, users.bob.id)
        assert await db_session.get(Recipe, recipe.id) is not None


class TestLikesAndImage:

    @pytest.mark.asyncio
    async def test_like_then_like_again(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        likes = await recipe_service.like_recipe(db_session, recipe.id, users.bob.id)
        assert [like.user for like in likes] == [users.bob.id]

        with pytest.raises(AlreadyLikedError):
            await recipe_service.like_recipe(db_session, recipe.id, users.bob.id)

        likes = await recipe_service.unlike_recipe(db_session, recipe.id, users.bob.id)
        assert likes == []

    @pytest.mark.asyncio
    async def test_image_requires_file(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        with pytest.raises(ValidationError, match="No file uploaded"):
            await recipe_service.attach_image(db_session, recipe.id, users.alice.id, None, None)

    @pytest.mark.asyncio
    async def test_image_ownership_checked_before_file(self, db_session, users, recipe_data):
        recipe = await _create(db_session, users.alice, recipe_data)

        with pytest.raises(ForbiddenError):
            await recipe_service.attach_image(db_session, recipe.id, users.bob.id, None, None)

    @pytest.mark.asyncio
    async def test_image_stored_and_recorded(
        self, db_session, users, recipe_data, sample_image_bytes
    ):
        recipe = await _create(db_session, users.alice, recipe_data)

        updated = await recipe_service.attach_image(
            db_session, recipe.id, users.alice.id, "dish.png", sample_image_bytes, "image/png"
        )

        assert updated.image.startswith("/uploads/")
        assert updated.image.endswith(".png")
