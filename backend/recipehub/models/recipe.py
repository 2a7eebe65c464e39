"""
RecipeHub Backend — Recipe SQLAlchemy Models
==============================================

What:  ORM models for `recipes`, their embedded `recipe_reviews`, and the
       `counters` table that hands out recipe ticket numbers.
Who:   Used by recipe_service, review_service and user_service.

Table Design Rationale:
    - title is unique under lower(): "Soup" and "SOUP" cannot coexist
    - ingredients / instructions are stored as newline-joined TEXT; the API
      exposes them as lists of lines
    - ticket is a display number drawn from `counters`, starting at 500 and
      never handed out twice, even after a recipe is deleted
    - rating / ratings_count are derived from the reviews and are only ever
      written by Recipe.recompute_rating()
    - reviews belong to their recipe (delete-orphan): removing a review from
      the list deletes the row, deleting the recipe deletes its reviews
    - one review per (recipe, author), enforced by a unique constraint
"""

import uuid
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recipehub.database import Base, TimestampMixin
from recipehub.models.user import User


class RecipeReview(TimestampMixin, Base):
    """A rating (1-5) with a comment, left by one user on one recipe."""

    __tablename__ = "recipe_reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped[User] = relationship(User, lazy="selectin")

    __table_args__ = (
        UniqueConstraint("recipe_id", "user_id", name="uq_recipe_reviews_recipe_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_recipe_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<RecipeReview(id={self.id}, recipe_id={self.recipe_id}, rating={self.rating})>"


class Recipe(TimestampMixin, Base):
    """
    A recipe with its embedded reviews and derived rating statistics.

    Invariants:
        rating        == mean(review.rating for review in reviews), or 0.0 if none
        ratings_count == len(reviews)
    """

    __tablename__ = "recipes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    image: Mapped[str] = mapped_column(String(500), nullable=False)
    ingredients: Mapped[str] = mapped_column(Text, nullable=False)
    instructions: Mapped[str] = mapped_column(Text, nullable=False)
    cooking_time: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    ticket: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        server_default=text("0"),
    )
    ratings_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    author: Mapped[User] = relationship(User, lazy="selectin")
    reviews: Mapped[List[RecipeReview]] = relationship(
        RecipeReview,
        order_by=RecipeReview.created_at,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def find_review(self, review_id: uuid.UUID) -> Optional[RecipeReview]:
        return next((r for r in self.reviews if r.id == review_id), None)

    def review_by(self, user_id: uuid.UUID) -> Optional[RecipeReview]:
        return next((r for r in self.reviews if r.user_id == user_id), None)

    def remove_review(self, review_id: uuid.UUID) -> None:
        # Rewrite the list; delete-orphan removes the dropped row on flush
        self.reviews = [r for r in self.reviews if r.id != review_id]

    def recompute_rating(self) -> None:
        """Derive rating and ratings_count from the full review list."""
        ratings = [review.rating for review in self.reviews]
        self.ratings_count = len(ratings)
        self.rating = sum(ratings) / len(ratings) if ratings else 0.0

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, ticket={self.ticket}, title='{self.title}')>"


Index("uq_recipes_title_lower", func.lower(Recipe.title), unique=True)


class Counter(Base):
    """Named monotonically increasing sequence (currently only recipe tickets)."""

    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Counter(name='{self.name}', seq={self.seq})>"
