"""Request and response schemas for /role-requests."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from recipehub.schemas.common import APIModel, AuthorRef


class RoleRequestCreate(APIModel):
    reason: Optional[str] = None


class RoleRequestProcess(APIModel):
    status: Optional[str] = Field(default=None, description="approved or rejected")
    admin_note: Optional[str] = None


class RoleRequestResponse(APIModel):
    id: uuid.UUID
    user: AuthorRef
    current_role: str
    requested_role: str
    reason: str
    status: str
    admin_note: str
    is_read: bool
    created_at: datetime
    updated_at: datetime


class RoleRequestCreatedResponse(APIModel):
    message: str = "Role upgrade request submitted successfully"
    request_id: uuid.UUID


class RoleRequestProcessedResponse(APIModel):
    message: str
    role_request: RoleRequestResponse


class PendingCountResponse(APIModel):
    count: int = Field(description="Requests still waiting for an admin decision")
