"""
RecipeHub Backend — HTTP API Tests
====================================

What:  End-to-end request handling through the FastAPI app: routing, the
       access dependency, exception handlers and camelCase JSON.
How:   httpx AsyncClient over ASGITransport; accounts are committed to the
       per-test database and authenticate with real bearer tokens.

What we test:
    ✅ Soup scenario: 201, ticket 500, list-form lines
    ✅ Review scenario: rating 4 / count 1, second review → 400
    ✅ Admin deleting a recipe owner → 400 "User has assigned recipes"
    ✅ 401 without a token, 403 with a bad token or the wrong role
    ✅ Role request round trip over HTTP
    ✅ Error body shape, request ID header, health check
"""

import pytest

SOUP = {
    "title": "Soup",
    "ingredients": ["water", "salt"],
    "instructions": ["boil", "season"],
    "cookingTime": 10,
}


class TestRecipeScenarios:

    @pytest.mark.asyncio
    async def test_create_soup(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])

        response = await test_client.post("/recipes", json=SOUP, headers=writer.headers)

        assert response.status_code == 201
        body = response.json()
        assert body["ticket"] == 500
        assert body["ingredients"] == ["water", "salt"]
        assert body["instructions"] == ["boil", "season"]
        assert body["cookingTime"] == 10
        assert body["rating"] == 0
        assert body["ratingsCount"] == 0
        assert body["user"] == {"id": str(writer.id), "username": "writer"}

    @pytest.mark.asyncio
    async def test_review_then_duplicate_review(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])
        reader = await make_account("reader")
        soup = (await test_client.post("/recipes", json=SOUP, headers=writer.headers)).json()

        first = await test_client.post(
            f"/recipes/{soup['id']}/reviews",
            json={"rating": 4, "comment": "good"},
            headers=reader.headers,
        )
        second = await test_client.post(
            f"/recipes/{soup['id']}/reviews",
            json={"rating": 5, "comment": "even better"},
            headers=reader.headers,
        )

        assert first.status_code == 201
        assert first.json()["newRating"] == 4
        assert first.json()["ratingsCount"] == 1
        assert second.status_code == 400
        assert second.json()["message"] == "Recipe already reviewed"

        detail = await test_client.get(f"/recipes/{soup['id']}", headers=reader.headers)
        assert detail.json()["rating"] == 4
        assert detail.json()["ratingsCount"] == 1
        assert detail.json()["reviews"][0]["user"]["username"] == "reader"

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_recipe_owner(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])
        admin = await make_account("admin", roles=["Admin"])
        await test_client.post("/recipes", json=SOUP, headers=writer.headers)

        response = await test_client.request(
            "DELETE", "/users", json={"id": str(writer.id)}, headers=admin.headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "User has assigned recipes"

    @pytest.mark.asyncio
    async def test_duplicate_title_is_conflict(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])
        await test_client.post("/recipes", json=SOUP, headers=writer.headers)

        response = await test_client.post(
            "/recipes", json={**SOUP, "title": "soup"}, headers=writer.headers
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Duplicate recipe title"

    @pytest.mark.asyncio
    async def test_derived_fields_in_input_are_ignored(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])

        response = await test_client.post(
            "/recipes",
            json={**SOUP, "rating": 5, "ratingsCount": 99, "ticket": 1},
            headers=writer.headers,
        )

        body = response.json()
        assert (body["rating"], body["ratingsCount"], body["ticket"]) == (0, 0, 500)

    @pytest.mark.asyncio
    async def test_manage_lists_only_own_recipes_for_writers(self, test_client, make_account):
        alice = await make_account("alice", roles=["Writer"])
        bob = await make_account("bob", roles=["Writer"])
        admin = await make_account("admin", roles=["Admin"])
        await test_client.post("/recipes", json=SOUP, headers=alice.headers)
        await test_client.post("/recipes", json={**SOUP, "title": "Stew"}, headers=bob.headers)

        mine = await test_client.get("/recipes/manage", headers=alice.headers)
        everything = await test_client.get("/recipes/manage", headers=admin.headers)
        public = await test_client.get("/recipes")

        assert [r["title"] for r in mine.json()] == ["Soup"]
        assert [r["title"] for r in everything.json()] == ["Soup", "Stew"]
        assert [r["title"] for r in public.json()] == ["Soup", "Stew"]


class TestAccessControl:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, test_client):
        response = await test_client.post("/recipes", json=SOUP)

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self, test_client):
        response = await test_client.post(
            "/recipes", json=SOUP, headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Forbidden"

    @pytest.mark.asyncio
    async def test_reader_cannot_create_recipes(self, test_client, make_account):
        reader = await make_account("reader")

        response = await test_client.post("/recipes", json=SOUP, headers=reader.headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_public_listing_needs_no_token(self, test_client):
        response = await test_client.get("/recipes")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_single_recipe_needs_a_token(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])
        soup = (await test_client.post("/recipes", json=SOUP, headers=writer.headers)).json()

        response = await test_client.get(f"/recipes/{soup['id']}")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete_review(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])
        alice = await make_account("alice")
        mallory = await make_account("mallory")
        soup = (await test_client.post("/recipes", json=SOUP, headers=writer.headers)).json()
        review = (
            await test_client.post(
                f"/recipes/{soup['id']}/reviews",
                json={"rating": 3, "comment": "fine"},
                headers=alice.headers,
            )
        ).json()["review"]

        response = await test_client.delete(
            f"/recipes/{soup['id']}/reviews/{review['id']}", headers=mallory.headers
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized to delete this review"


class TestRoleRequestsOverHttp:

    @pytest.mark.asyncio
    async def test_request_approve_and_read(self, test_client, make_account):
        reader = await make_account("reader")
        admin = await make_account("admin", roles=["Admin"])

        created = await test_client.post(
            "/role-requests", json={"reason": "I cook a lot"}, headers=reader.headers
        )
        duplicate = await test_client.post(
            "/role-requests", json={"reason": "again"}, headers=reader.headers
        )
        count = await test_client.get("/role-requests/count/unread", headers=admin.headers)

        assert created.status_code == 201
        assert duplicate.status_code == 409
        assert count.json() == {"count": 1}

        request_id = created.json()["requestId"]
        processed = await test_client.patch(
            f"/role-requests/{request_id}",
            json={"status": "approved", "adminNote": "Enjoy"},
            headers=admin.headers,
        )
        assert processed.status_code == 200
        assert processed.json()["roleRequest"]["adminNote"] == "Enjoy"

        marked = await test_client.patch(f"/role-requests/{request_id}/read", headers=reader.headers)
        mine = await test_client.get("/role-requests/mine", headers=reader.headers)
        users = await test_client.get("/users", headers=admin.headers)

        assert marked.json() == {"message": "Request marked as read"}
        assert mine.json()[0]["isRead"] is True
        roles = {u["username"]: u["roles"] for u in users.json()}
        assert roles["reader"] == ["Reader", "Writer"]

    @pytest.mark.asyncio
    async def test_listing_all_requests_is_admin_only(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])

        response = await test_client.get("/role-requests", headers=writer.headers)

        assert response.status_code == 403


class TestAuthAndSavedRecipes:

    @pytest.mark.asyncio
    async def test_login_then_use_token(self, test_client, make_account):
        await make_account("writer", roles=["Writer"], password="pw")

        login = await test_client.post("/auth", json={"username": "writer", "password": "pw"})
        token = login.json()["accessToken"]
        response = await test_client.post(
            "/recipes", json=SOUP, headers={"Authorization": f"Bearer {token}"}
        )

        assert login.status_code == 200
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_bad_login_is_401(self, test_client, make_account):
        await make_account("writer", password="pw")

        response = await test_client.post("/auth", json={"username": "writer", "password": "no"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_save_toggle(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])
        reader = await make_account("reader")
        soup = (await test_client.post("/recipes", json=SOUP, headers=writer.headers)).json()

        saved = await test_client.patch(
            "/users/save-recipe", json={"recipeId": soup["id"]}, headers=reader.headers
        )
        listed = await test_client.get("/users/saved-recipes", headers=reader.headers)
        unsaved = await test_client.patch(
            "/users/save-recipe", json={"recipeId": soup["id"]}, headers=reader.headers
        )

        assert saved.json() == [soup["id"]]
        assert [r["title"] for r in listed.json()] == ["Soup"]
        assert unsaved.json() == []


class TestErrorsAndPlumbing:

    @pytest.mark.asyncio
    async def test_unknown_recipe_is_404_with_error_body(self, test_client, make_account):
        reader = await make_account("reader")

        response = await test_client.get(
            "/recipes/00000000-0000-0000-0000-000000000000", headers=reader.headers
        )

        body = response.json()
        assert response.status_code == 404
        assert body["error"] == "not_found"
        assert body["message"] == "Recipe not found"
        assert body["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, test_client, make_account):
        reader = await make_account("reader")

        response = await test_client.get("/recipes/not-a-uuid", headers=reader.headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_missing_fields_message(self, test_client, make_account):
        writer = await make_account("writer", roles=["Writer"])

        response = await test_client.post("/recipes", json={"title": "Soup"}, headers=writer.headers)

        assert response.status_code == 400
        assert response.json()["message"] == (
            "Missing required fields: ingredients, instructions, cookingTime"
        )

    @pytest.mark.asyncio
    async def test_client_request_id_is_echoed(self, test_client):
        response = await test_client.get("/recipes", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
