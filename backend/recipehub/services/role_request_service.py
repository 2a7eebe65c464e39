"""
RecipeHub Backend — Role Request Service
==========================================

What:  The Reader → Writer upgrade workflow.
Who:   Called by routes/role_requests.py.

Workflow:
    1. A Reader submits a request with a reason (one pending request per user)
    2. An Admin approves or rejects it, optionally leaving a note
       - approve grants Writer; granting an already-held role is a no-op
    3. The requester marks the decided request as read

Closed requests:
    Repeating the decision a request already carries is accepted and only
    refreshes the admin note. Flipping a closed request to the other
    decision is a ConflictError.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import ConflictError, NotFoundError, ValidationError
from recipehub.models.role_request import DECISIONS, RequestStatus, RoleRequest
from recipehub.policy import Principal, ensure_owner
from recipehub.roles import Role
from recipehub.schemas.common import MessageResponse
from recipehub.schemas.role_request import (
    PendingCountResponse,
    RoleRequestCreate,
    RoleRequestCreatedResponse,
    RoleRequestProcess,
    RoleRequestProcessedResponse,
    RoleRequestResponse,
)
from recipehub.services.common import flush, is_missing
from recipehub.services.recipe_service import author_ref, recipe_service

logger = logging.getLogger(__name__)

ALREADY_PENDING = "You already have a pending role upgrade request"


def role_request_to_response(request: RoleRequest) -> RoleRequestResponse:
    return RoleRequestResponse(
        id=request.id,
        user=author_ref(request.user),
        current_role=request.current_role,
        requested_role=request.requested_role,
        reason=request.reason,
        status=request.status,
        admin_note=request.admin_note,
        is_read=request.is_read,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


class RoleRequestService:

    async def _load(self, db: AsyncSession, request_id: UUID) -> RoleRequest:
        request = await db.get(RoleRequest, request_id)
        if request is None:
            raise NotFoundError(
                resource="role request",
                resource_id=str(request_id),
                message="Role request not found",
            )
        return request

    async def has_pending(self, db: AsyncSession, user_id: UUID) -> bool:
        result = await db.execute(
            select(RoleRequest.id)
            .where(RoleRequest.user_id == user_id)
            .where(RoleRequest.status == RequestStatus.PENDING.value)
            .limit(1)
        )
        return result.first() is not None

    async def submit(
        self,
        db: AsyncSession,
        user_id: UUID,
        payload: RoleRequestCreate,
    ) -> RoleRequestCreatedResponse:
        """
        File a Writer upgrade request for `user_id`.

        Raises:
            ValidationError: no reason given
            ConflictError:   a pending request exists, or the user already
                             holds Writer or Admin
        """
        if is_missing(payload.reason):
            raise ValidationError("Please provide a reason for your request", field="reason")

        if await self.has_pending(db, user_id):
            raise ConflictError(ALREADY_PENDING)

        user = await recipe_service.load_user(db, user_id)
        if user.has_role(Role.WRITER) or user.has_role(Role.ADMIN):
            raise ConflictError("You already have Writer or Admin privileges")

        request = RoleRequest(
            user=user,
            current_role=", ".join(user.roles),
            requested_role=Role.WRITER.value,
            reason=payload.reason.strip(),
            status=RequestStatus.PENDING.value,
            admin_note="",
            is_read=False,
        )
        db.add(request)
        await flush(db, "submit_role_request", on_conflict=ConflictError(ALREADY_PENDING))

        logger.info("Role request %s submitted by %s", request.id, user.username)
        return RoleRequestCreatedResponse(request_id=request.id)

    async def list_all(self, db: AsyncSession) -> List[RoleRequestResponse]:
        result = await db.execute(select(RoleRequest).order_by(RoleRequest.created_at.desc()))
        return [role_request_to_response(r) for r in result.scalars().all()]

    async def list_mine(self, db: AsyncSession, user_id: UUID) -> List[RoleRequestResponse]:
        result = await db.execute(
            select(RoleRequest)
            .where(RoleRequest.user_id == user_id)
            .order_by(RoleRequest.created_at.desc())
        )
        return [role_request_to_response(r) for r in result.scalars().all()]

    async def process(
        self,
        db: AsyncSession,
        request_id: UUID,
        payload: RoleRequestProcess,
    ) -> RoleRequestProcessedResponse:
        """
        Apply an Admin decision.

        Approving adds Writer to the requester's roles (no-op when already
        held). The decision and admin note are recorded on the request and
        its read flag is left for the requester.

        Raises:
            ValidationError: status is not "approved" or "rejected"
            NotFoundError:   unknown request, or its requester is gone
            ConflictError:   request already closed with the other decision
        """
        try:
            decision = RequestStatus(payload.status)
        except ValueError:
            decision = None
        if decision not in DECISIONS:
            raise ValidationError(
                "Please provide a valid status (approved or rejected)",
                field="status",
            )

        request = await self._load(db, request_id)
        if not request.is_pending and request.status != decision.value:
            raise ConflictError(
                f"Role request already {request.status}",
                context={"request_id": str(request_id)},
            )

        if decision is RequestStatus.APPROVED:
            user = await recipe_service.load_user(db, request.user_id)
            if user.grant(Role.WRITER):
                logger.info("Granted %s to %s", Role.WRITER.value, user.username)

        request.status = decision.value
        request.admin_note = (payload.admin_note or "").strip()
        await flush(db, "process_role_request")

        logger.info("Role request %s %s", request.id, decision.value)
        return RoleRequestProcessedResponse(
            message=f"Role request {decision.value}",
            role_request=role_request_to_response(request),
        )

    async def mark_read(
        self,
        db: AsyncSession,
        request_id: UUID,
        principal: Principal,
    ) -> MessageResponse:
        request = await self._load(db, request_id)
        ensure_owner(principal, request.user_id)
        request.is_read = True
        await flush(db, "mark_role_request_read")
        return MessageResponse(message="Request marked as read")

    async def count_pending(self, db: AsyncSession) -> PendingCountResponse:
        result = await db.execute(
            select(func.count(RoleRequest.id)).where(
                RoleRequest.status == RequestStatus.PENDING.value
            )
        )
        return PendingCountResponse(count=result.scalar() or 0)


role_request_service = RoleRequestService()
