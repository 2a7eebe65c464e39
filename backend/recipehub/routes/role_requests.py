"""
RecipeHub Backend — Role Request Route Handlers
=================================================

What:  /role-requests submit, list, process, mark read and pending count.

Route ordering:
    The fixed paths (/mine, /count/unread) are declared before the
    /{request_id} routes.

The admin badge endpoint is named "count/unread" but counts pending requests;
there is no per-admin read state.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import require
from recipehub.database import get_db_session
from recipehub.policy import Action, Principal
from recipehub.schemas.common import ErrorResponse, MessageResponse
from recipehub.schemas.role_request import (
    PendingCountResponse,
    RoleRequestCreate,
    RoleRequestCreatedResponse,
    RoleRequestProcess,
    RoleRequestProcessedResponse,
    RoleRequestResponse,
)
from recipehub.services.role_request_service import role_request_service

router = APIRouter(prefix="/role-requests", tags=["Role Requests"])


@router.post(
    "",
    response_model=RoleRequestCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "No reason given", "model": ErrorResponse},
        409: {"description": "Pending request exists or role already held", "model": ErrorResponse},
    },
    summary="Ask for the Writer role",
)
async def submit_role_request(
    payload: RoleRequestCreate,
    principal: Principal = Depends(require(Action.SUBMIT_ROLE_REQUEST)),
    db: AsyncSession = Depends(get_db_session),
) -> RoleRequestCreatedResponse:
    return await role_request_service.submit(db, principal.id, payload)


@router.get(
    "",
    response_model=List[RoleRequestResponse],
    summary="List every role request (Admin)",
)
async def list_role_requests(
    _: Principal = Depends(require(Action.LIST_ROLE_REQUESTS)),
    db: AsyncSession = Depends(get_db_session),
) -> List[RoleRequestResponse]:
    return await role_request_service.list_all(db)


@router.get(
    "/mine",
    response_model=List[RoleRequestResponse],
    summary="List the caller's own role requests",
)
async def list_my_role_requests(
    principal: Principal = Depends(require(Action.LIST_OWN_ROLE_REQUESTS)),
    db: AsyncSession = Depends(get_db_session),
) -> List[RoleRequestResponse]:
    return await role_request_service.list_mine(db, principal.id)


@router.get(
    "/count/unread",
    response_model=PendingCountResponse,
    summary="Number of pending role requests (Admin)",
)
async def count_pending_role_requests(
    _: Principal = Depends(require(Action.COUNT_PENDING_ROLE_REQUESTS)),
    db: AsyncSession = Depends(get_db_session),
) -> PendingCountResponse:
    return await role_request_service.count_pending(db)


@router.patch(
    "/{request_id}",
    response_model=RoleRequestProcessedResponse,
    responses={
        400: {"description": "Status must be approved or rejected", "model": ErrorResponse},
        404: {"description": "Role request not found", "model": ErrorResponse},
        409: {"description": "Request already closed with another decision", "model": ErrorResponse},
    },
    summary="Approve or reject a role request (Admin)",
)
async def process_role_request(
    request_id: UUID,
    payload: RoleRequestProcess,
    _: Principal = Depends(require(Action.PROCESS_ROLE_REQUEST)),
    db: AsyncSession = Depends(get_db_session),
) -> RoleRequestProcessedResponse:
    return await role_request_service.process(db, request_id, payload)


@router.patch(
    "/{request_id}/read",
    response_model=MessageResponse,
    responses={
        403: {"description": "Not the requester", "model": ErrorResponse},
        404: {"description": "Role request not found", "model": ErrorResponse},
    },
    summary="Mark a decided request as read",
)
async def mark_role_request_read(
    request_id: UUID,
    principal: Principal = Depends(require(Action.MARK_ROLE_REQUEST_READ)),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await role_request_service.mark_read(db, request_id, principal)
