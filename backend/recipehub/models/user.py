"""
RecipeHub Backend — User SQLAlchemy Models
============================================

What:  ORM models for the `users` and `saved_recipes` tables.
Who:   Used by user_service, auth_service and as the author side of recipes,
       reviews and role requests.

Table Design:
    - username is unique under lower(): "Alice" and "alice" cannot coexist
    - password holds a bcrypt digest, never plaintext
    - roles is a JSON list of Role labels, default ["Reader"]
    - saved_recipes is an ordered set: one row per (user, recipe), ordered by
      the time the recipe was saved
"""

import uuid
from datetime import datetime
from typing import FrozenSet, List

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recipehub.database import Base, TimestampMixin, utcnow
from recipehub.roles import DEFAULT_ROLES, Role, parse_roles


class SavedRecipe(Base):
    """One entry in a user's saved-recipes list."""

    __tablename__ = "saved_recipes"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("recipes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<SavedRecipe(user_id={self.user_id}, recipe_id={self.recipe_id})>"


class User(TimestampMixin, Base):
    """
    A site account.

    Lifecycle:
        1. Created by POST /users with roles defaulting to ["Reader"]
        2. Roles change through PATCH /users or an approved role request
        3. Deleted only while it owns no recipes
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    roles: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=lambda: list(DEFAULT_ROLES),
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    saved: Mapped[List[SavedRecipe]] = relationship(
        SavedRecipe,
        order_by=SavedRecipe.created_at,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def role_set(self) -> FrozenSet[Role]:
        return parse_roles(self.roles or [])

    def has_role(self, role: Role) -> bool:
        return role in self.role_set

    def grant(self, role: Role) -> bool:
        """Add `role` if missing. Returns True when the role list changed."""
        if self.has_role(role):
            return False
        # Reassign rather than append so the JSON column is flagged dirty
        self.roles = [*self.roles, role.value]
        return True

    @property
    def saved_recipe_ids(self) -> List[uuid.UUID]:
        return [entry.recipe_id for entry in self.saved]

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', roles={self.roles})>"


Index("uq_users_username_lower", func.lower(User.username), unique=True)
