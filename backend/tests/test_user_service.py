"""
RecipeHub Backend — User & Login Service Tests
================================================

What we test:
    ✅ Create / update validation, case-insensitive username uniqueness
    ✅ Passwords stored as bcrypt digests, rehashed only when supplied
    ✅ Delete blocked while the user owns recipes
    ✅ Delete removes the user's reviews (ratings recomputed) and requests
    ✅ Saved-recipe toggle keeps order and rejects unknown recipes
    ✅ Login issues a token only for active accounts with the right password
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from recipehub.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from recipehub.models.role_request import RoleRequest
from recipehub.models.user import User
from recipehub.schemas.recipe import RecipeCreate, ReviewCreate
from recipehub.schemas.role_request import RoleRequestCreate
from recipehub.schemas.user import (
    LoginRequest,
    SaveRecipeRequest,
    UserCreate,
    UserDelete,
    UserUpdate,
)
from recipehub.security import decode_access_token, verify_password
from recipehub.services.auth_service import AuthService
from recipehub.services.recipe_service import recipe_service
from recipehub.services.review_service import review_service
from recipehub.services.role_request_service import role_request_service
from recipehub.services.user_service import UserService


async def create_recipe(db_session, owner, title):
    return await recipe_service.create_recipe(
        db_session,
        owner.id,
        RecipeCreate(title=title, ingredients=["x"], instructions=["y"], cooking_time=5),
    )


class TestCreateAndUpdate:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_defaults_to_reader(self, db_session):
        result = await self.service.create_user(db_session, UserCreate(username="alice", password="pw"))
        user = await db_session.get(User, result.id)

        assert result.message == "New user alice created"
        assert user.roles == ["Reader"]
        assert user.password != "pw"
        assert verify_password("pw", user.password)

    @pytest.mark.asyncio
    async def test_create_requires_username_and_password(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_user(db_session, UserCreate(username="alice"))
        assert exc_info.value.message == "All fields are required"

    @pytest.mark.asyncio
    async def test_duplicate_username_ignores_case(self, db_session, make_user):
        await make_user("Alice")

        with pytest.raises(ConflictError) as exc_info:
            await self.service.create_user(db_session, UserCreate(username="alice", password="pw"))

        assert exc_info.value.message == "Duplicate username"

    @pytest.mark.asyncio
    async def test_list_users_omits_passwords(self, db_session, make_user):
        await make_user("alice")

        users = await self.service.list_users(db_session)

        assert [u.username for u in users] == ["alice"]
        assert "password" not in users[0].model_dump()

    @pytest.mark.asyncio
    async def test_list_users_when_empty(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.list_users(db_session)
        assert exc_info.value.message == "No users found"

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_keeps_password(self, db_session, make_user):
        user = await make_user("alice")
        old_digest = user.password

        result = await self.service.update_user(
            db_session,
            UserUpdate(id=user.id, username="alicia", roles=["Reader", "Writer", "Writer"], active=False),
        )

        assert result.message == "alicia updated"
        assert user.roles == ["Reader", "Writer"]
        assert user.active is False
        assert user.password == old_digest

    @pytest.mark.asyncio
    async def test_update_rehashes_new_password(self, db_session, make_user):
        user = await make_user("alice")

        await self.service.update_user(
            db_session,
            UserUpdate(id=user.id, username="alice", roles=["Reader"], active=True, password="new-pw"),
        )

        assert verify_password("new-pw", user.password)

    @pytest.mark.asyncio
    async def test_update_requires_roles(self, db_session, make_user):
        user = await make_user("alice")

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_user(
                db_session, UserUpdate(id=user.id, username="alice", roles=[], active=True)
            )

        assert exc_info.value.message == "All fields except password are required"

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_user(
                db_session, UserUpdate(id=uuid4(), username="ghost", roles=["Reader"], active=True)
            )


class TestDelete:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_user_owning_recipes_cannot_be_deleted(self, db_session, make_user):
        writer = await make_user("writer", roles=["Writer"])
        await create_recipe(db_session, writer, "Soup")

        with pytest.raises(ValidationError) as exc_info:
            await self.service.delete_user(db_session, UserDelete(id=writer.id))

        assert exc_info.value.message == "User has assigned recipes"

    @pytest.mark.asyncio
    async def test_id_is_required(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.delete_user(db_session, UserDelete())
        assert exc_info.value.message == "User ID Required"

    @pytest.mark.asyncio
    async def test_delete_removes_reviews_and_requests(self, db_session, make_user):
        writer = await make_user("writer", roles=["Writer"])
        alice = await make_user("alice")
        bob = await make_user("bob")
        soup = await create_recipe(db_session, writer, "Soup")
        await review_service.add_review(db_session, soup.id, alice.id, ReviewCreate(rating=1, comment="no"))
        await review_service.add_review(db_session, soup.id, bob.id, ReviewCreate(rating=5, comment="yes"))
        await role_request_service.submit(db_session, alice.id, RoleRequestCreate(reason="please"))
        alice_id = alice.id

        result = await self.service.delete_user(db_session, UserDelete(id=alice_id))

        assert result.message == f"Username alice with ID {alice_id} deleted"
        recipe = await recipe_service.get_recipe(db_session, soup.id)
        assert (recipe.rating, recipe.ratings_count) == (5, 1)
        assert [r.user.username for r in recipe.reviews] == ["bob"]
        requests = await db_session.execute(select(func.count(RoleRequest.id)))
        assert requests.scalar() == 0
        assert await db_session.get(User, alice_id) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_user(db_session, UserDelete(id=uuid4()))


class TestSavedRecipes:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_toggle_adds_then_removes(self, db_session, make_user):
        writer = await make_user("writer", roles=["Writer"])
        reader = await make_user("reader")
        soup = await create_recipe(db_session, writer, "Soup")
        stew = await create_recipe(db_session, writer, "Stew")

        assert await self.service.toggle_saved_recipe(db_session, reader.id, SaveRecipeRequest(recipe_id=stew.id)) == [stew.id]
        assert await self.service.toggle_saved_recipe(db_session, reader.id, SaveRecipeRequest(recipe_id=soup.id)) == [stew.id, soup.id]

        saved = await self.service.list_saved_recipes(db_session, reader.id)
        assert [r.title for r in saved] == ["Stew", "Soup"]

        assert await self.service.toggle_saved_recipe(db_session, reader.id, SaveRecipeRequest(recipe_id=stew.id)) == [soup.id]

    @pytest.mark.asyncio
    async def test_saving_unknown_recipe_is_not_found(self, db_session, make_user):
        reader = await make_user("reader")

        with pytest.raises(NotFoundError):
            await self.service.toggle_saved_recipe(db_session, reader.id, SaveRecipeRequest(recipe_id=uuid4()))


class TestLogin:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_issues_token_with_roles(self, db_session, make_user):
        user = await make_user("Alice", roles=["Writer"], password="pw")

        token = await self.service.login(db_session, LoginRequest(username="alice", password="pw"))
        principal = decode_access_token(token.access_token)

        assert principal.id == user.id
        assert principal.username == "Alice"

    @pytest.mark.asyncio
    async def test_wrong_password_is_unauthorized(self, db_session, make_user):
        await make_user("alice", password="pw")
        with pytest.raises(UnauthorizedError):
            await self.service.login(db_session, LoginRequest(username="alice", password="nope"))

    @pytest.mark.asyncio
    async def test_inactive_account_is_unauthorized(self, db_session, make_user):
        await make_user("alice", password="pw", active=False)
        with pytest.raises(UnauthorizedError):
            await self.service.login(db_session, LoginRequest(username="alice", password="pw"))

    @pytest.mark.asyncio
    async def test_unknown_account_is_unauthorized(self, db_session):
        with pytest.raises(UnauthorizedError):
            await self.service.login(db_session, LoginRequest(username="ghost", password="pw"))
