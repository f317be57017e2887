"""
RecipeHub Backend — API Tests
===============================

What:  End-to-end HTTP behavior: authentication, status codes, the error
       body shape, camelCase payloads and the main resource flows.
How:   HTTPX AsyncClient over ASGITransport against a fresh app bound to an
       in-memory database (see conftest.py).
"""

from uuid import uuid4

import pytest


async def _create_recipe(client, headers, recipe_data, **overrides):
    response = await client.post("/api/recipes", json={**recipe_data, **overrides}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_private_route_without_token(self, client, recipe_data):
        response = await client.post("/api/recipes", json=recipe_data)

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthenticated"
        assert body["message"] == "No valid token, authorization denied"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_garbage_token(self, client, recipe_data):
        response = await client.post(
            "/api/recipes", json=recipe_data, headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Token is not valid"

    @pytest.mark.asyncio
    async def test_public_route_without_token(self, client):
        response = await client.get("/api/recipes")
        assert response.status_code == 200
        assert response.json() == []


class TestRecipeApi:

    @pytest.mark.asyncio
    async def test_create_returns_camel_case_recipe(self, client, users, auth_headers, recipe_data):
        body = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        assert body["title"] == "Soup"
        assert body["cookingTime"] == 20
        assert body["isForked"] is False
        assert body["parentRecipe"] is None
        assert body["likes"] == []
        assert body["user"] == {
            "id": str(users.alice.id),
            "name": "Alice",
            "avatar": "https://avatars.example.com/alice.png",
        }

    @pytest.mark.asyncio
    async def test_blank_title_is_field_error(self, client, users, auth_headers, recipe_data):
        response = await client.post(
            "/api/recipes", json={**recipe_data, "title": "   "}, headers=auth_headers(users.alice)
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Title is required"
        assert body["details"]["errors"] == [{"field": "body.title", "message": "Title is required"}]

    @pytest.mark.asyncio
    async def test_empty_ingredients_rejected(self, client, users, auth_headers, recipe_data):
        response = await client.post(
            "/api/recipes", json={**recipe_data, "ingredients": []}, headers=auth_headers(users.alice)
        )
        assert response.status_code == 400
        assert response.json()["message"] == "At least one ingredient is required"

    @pytest.mark.asyncio
    async def test_get_inlines_parent(self, client, users, auth_headers, recipe_data):
        parent = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        fork = await client.post(
            f"/api/recipes/{parent['id']}/fork", headers=auth_headers(users.bob)
        )
        assert fork.status_code == 200
        assert fork.json()["modifications"] == "Forked recipe"

        detail = await client.get(f"/api/recipes/{fork.json()['id']}")

        assert detail.status_code == 200
        assert detail.json()["parentRecipe"]["id"] == parent["id"]
        assert detail.json()["parentRecipe"]["user"]["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_fork_with_modifications(self, client, users, auth_headers, recipe_data):
        parent = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        fork = await client.post(
            f"/api/recipes/{parent['id']}/fork",
            json={"modifications": "Half the salt"},
            headers=auth_headers(users.bob),
        )
        assert fork.json()["modifications"] == "Half the salt"

    @pytest.mark.asyncio
    async def test_list_by_user(self, client, users, auth_headers, recipe_data):
        await _create_recipe(client, auth_headers(users.alice), recipe_data)
        await _create_recipe(client, auth_headers(users.bob), recipe_data, title="Stew")

        response = await client.get(f"/api/recipes/user/{users.bob.id}")
        assert [r["title"] for r in response.json()] == ["Stew"]

    @pytest.mark.asyncio
    async def test_update_by_non_owner_is_forbidden(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        response = await client.put(
            f"/api/recipes/{recipe['id']}", json={"title": "Mine"}, headers=auth_headers(users.bob)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_update_is_merge_patch(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        response = await client.put(
            f"/api/recipes/{recipe['id']}", json={"servings": 6}, headers=auth_headers(users.alice)
        )

        assert response.status_code == 200
        assert response.json()["servings"] == 6
        assert response.json()["title"] == "Soup"

    @pytest.mark.asyncio
    async def test_unknown_recipe(self, client):
        response = await client.get(f"/api/recipes/{uuid4()}")
        assert response.status_code == 404
        assert response.json() == {
            "error": "not_found",
            "message": "Recipe not found",
            "request_id": response.headers["X-Request-ID"],
        }

    @pytest.mark.asyncio
    async def test_malformed_id(self, client):
        response = await client.get("/api/recipes/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_like_conflict_codes(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        url = f"/api/recipes/{recipe['id']}"

        liked = await client.put(f"{url}/like", headers=auth_headers(users.bob))
        assert liked.status_code == 200
        assert liked.json() == [{"user": str(users.bob.id)}]

        again = await client.put(f"{url}/like", headers=auth_headers(users.bob))
        assert again.status_code == 409
        assert again.json()["error"] == "already_liked"

        unliked = await client.put(f"{url}/unlike", headers=auth_headers(users.bob))
        assert unliked.json() == []

        again = await client.put(f"{url}/unlike", headers=auth_headers(users.bob))
        assert again.status_code == 409
        assert again.json()["error"] == "not_yet_liked"

    @pytest.mark.asyncio
    async def test_delete_cascades_comments(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        await client.post(
            f"/api/comments/{recipe['id']}", json={"text": "Yum"}, headers=auth_headers(users.bob)
        )

        response = await client.delete(f"/api/recipes/{recipe['id']}", headers=auth_headers(users.alice))

        assert response.status_code == 200
        assert response.json() == {"msg": "Recipe removed"}
        comments = await client.get(f"/api/comments/{recipe['id']}")
        assert comments.status_code == 404


class TestImageApi:

    @pytest.mark.asyncio
    async def test_upload_and_serve(self, client, users, auth_headers, recipe_data, sample_image_bytes):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        response = await client.post(
            f"/api/recipes/{recipe['id']}/image",
            files={"image": ("dish.png", sample_image_bytes, "image/png")},
            headers=auth_headers(users.alice),
        )

        assert response.status_code == 200
        image_path = response.json()["image"]
        assert image_path.startswith("/uploads/")

        served = await client.get(image_path)
        assert served.status_code == 200
        assert served.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_upload_without_file(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        response = await client.post(
            f"/api/recipes/{recipe['id']}/image", headers=auth_headers(users.alice)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"

    @pytest.mark.asyncio
    async def test_upload_wrong_type(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        response = await client.post(
            f"/api/recipes/{recipe['id']}/image",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers(users.alice),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_html_disguised_as_png_rejected(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.alice), recipe_data)

        response = await client.post(
            f"/api/recipes/{recipe['id']}/image",
            files={"image": ("x.png", b"<html><script>alert(1)</script></html>", "image/png")},
            headers=auth_headers(users.alice),
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "image"}
        stored = await client.get(f"/api/recipes/{recipe['id']}")
        assert stored.json()["image"] is None

    @pytest.mark.asyncio
    async def test_missing_upload(self, client):
        response = await client.get("/uploads/2024/01/01/missing.png")
        assert response.status_code == 404


class TestCommentApi:

    @pytest.mark.asyncio
    async def test_mismatched_pair(self, client, users, auth_headers, recipe_data):
        soup = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        stew = await _create_recipe(client, auth_headers(users.alice), recipe_data, title="Stew")
        comment = await client.post(
            f"/api/comments/{soup['id']}", json={"text": "Yum"}, headers=auth_headers(users.bob)
        )
        assert comment.status_code == 200
        assert comment.json()["user"]["name"] == "Bob"

        response = await client.get(f"/api/comments/{stew['id']}/{comment.json()['id']}")

        assert response.status_code == 400
        assert response.json()["error"] == "reference_mismatch"

    @pytest.mark.asyncio
    async def test_recipe_owner_deletes_comment(self, client, users, auth_headers, recipe_data):
        soup = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        comment = await client.post(
            f"/api/comments/{soup['id']}", json={"text": "Yum"}, headers=auth_headers(users.bob)
        )
        url = f"/api/comments/{soup['id']}/{comment.json()['id']}"

        denied = await client.delete(url, headers=auth_headers(users.carol))
        assert denied.status_code == 403

        removed = await client.delete(url, headers=auth_headers(users.alice))
        assert removed.json() == {"msg": "Comment removed"}

    @pytest.mark.asyncio
    async def test_blank_comment(self, client, users, auth_headers, recipe_data):
        soup = await _create_recipe(client, auth_headers(users.alice), recipe_data)
        response = await client.post(
            f"/api/comments/{soup['id']}", json={"text": ""}, headers=auth_headers(users.bob)
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Text is required"


class TestFolderApi:

    @pytest.mark.asyncio
    async def test_private_folder_forbidden_for_others(self, client, users, auth_headers):
        created = await client.post(
            "/api/folders", json={"name": "Secret"}, headers=auth_headers(users.alice)
        )
        assert created.status_code == 200
        url = f"/api/folders/{created.json()['id']}"

        assert (await client.get(url)).status_code == 403
        assert (await client.get(url, headers=auth_headers(users.bob))).status_code == 403
        assert (await client.get(url, headers=auth_headers(users.alice))).status_code == 200

    @pytest.mark.asyncio
    async def test_membership_flow(self, client, users, auth_headers, recipe_data):
        recipe = await _create_recipe(client, auth_headers(users.bob), recipe_data)
        folder = await client.post(
            "/api/folders",
            json={"name": "Shared", "isPublic": True},
            headers=auth_headers(users.alice),
        )
        url = f"/api/folders/{folder.json()['id']}/recipes/{recipe['id']}"

        first = await client.put(url, headers=auth_headers(users.alice))
        assert first.json()["recipes"] == [recipe["id"]]

        second = await client.put(url, headers=auth_headers(users.alice))
        assert second.status_code == 409
        assert second.json()["error"] == "already_member"

        public = await client.get("/api/folders/public/all")
        assert public.status_code == 200
        assert public.json()[0]["user"]["name"] == "Alice"
        assert public.json()[0]["recipes"] == [recipe["id"]]

        removed = await client.delete(url, headers=auth_headers(users.alice))
        assert removed.json()["recipes"] == []

        again = await client.delete(url, headers=auth_headers(users.alice))
        assert again.status_code == 409
        assert again.json()["error"] == "not_member"

    @pytest.mark.asyncio
    async def test_own_folders_require_token(self, client):
        response = await client.get("/api/folders")
        assert response.status_code == 401


class TestOperational:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert "uptimeSeconds" in body

    @pytest.mark.asyncio
    async def test_client_request_id_echoed(self, client):
        response = await client.get("/api/recipes", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"
