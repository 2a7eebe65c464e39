"""
RecipeHub Backend — Recipe & Review Schemas
=============================================

What:  Request bodies and response shapes for /recipes and
       /recipes/{id}/reviews.

Input contracts:
    Every input field is optional at the schema level. Presence rules
    ("Missing required fields: title, cookingTime") are business rules
    checked by the services so the client gets one 400 naming every
    missing field. Derived fields (rating, ratingsCount, ticket) are not
    part of any input schema; unknown keys are ignored.
"""

import uuid
from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field

from recipehub.schemas.common import APIModel, AuthorRef

# Lines may be sent as a list or as one newline-joined string
Lines = Union[List[str], str]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RecipeCreate(APIModel):
    title: Optional[str] = None
    image: Optional[str] = None
    ingredients: Optional[Lines] = None
    instructions: Optional[Lines] = None
    cooking_time: Optional[int] = Field(default=None, ge=0, description="Minutes")
    category: Optional[str] = None


class RecipeUpdate(RecipeCreate):
    user: Optional[uuid.UUID] = Field(default=None, description="Owner user id")


class ReviewCreate(APIModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReviewResponse(APIModel):
    id: uuid.UUID
    user: AuthorRef
    rating: int
    comment: str
    created_at: datetime


class RecipeResponse(APIModel):
    """
    What:  Full recipe representation with author and line lists expanded.
    Who:   Returned by list, manage, detail, create and saved-recipes routes.
    """
    id: uuid.UUID
    user: AuthorRef
    title: str
    image: str
    ingredients: List[str]
    instructions: List[str]
    cooking_time: int
    category: str
    ticket: int
    rating: float
    ratings_count: int
    reviews: List[ReviewResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class RecipeMutationResponse(APIModel):
    message: str
    id: uuid.UUID


class ReviewAddedResponse(APIModel):
    message: str = "Review added"
    review: ReviewResponse
    new_rating: float
    ratings_count: int


class ReviewDeletedResponse(APIModel):
    message: str = "Review deleted"
    new_rating: float
    ratings_count: int
