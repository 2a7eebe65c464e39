"""Request and response schemas for /users and /auth."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from recipehub.roles import Role
from recipehub.schemas.common import APIModel


class UserCreate(APIModel):
    username: Optional[str] = None
    password: Optional[str] = None
    roles: Optional[List[Role]] = None


class UserUpdate(APIModel):
    id: Optional[uuid.UUID] = None
    username: Optional[str] = None
    roles: Optional[List[Role]] = None
    active: Optional[bool] = None
    password: Optional[str] = None


class UserDelete(APIModel):
    id: Optional[uuid.UUID] = None


class SaveRecipeRequest(APIModel):
    recipe_id: Optional[uuid.UUID] = None


class UserResponse(APIModel):
    """An account as other users see it: never includes the password digest."""
    id: uuid.UUID
    username: str
    roles: List[str]
    active: bool
    saved_recipes: List[uuid.UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class UserCreatedResponse(APIModel):
    message: str
    id: uuid.UUID


class LoginRequest(APIModel):
    username: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(APIModel):
    access_token: str
    token_type: str = "bearer"
