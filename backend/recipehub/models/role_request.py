"""
RecipeHub Backend — Role Request SQLAlchemy Model
===================================================

What:  ORM model for `role_requests`: a Reader asking to become a Writer.

State machine:
    pending ──approve──▶ approved   (terminal)
        └────reject───▶ rejected   (terminal)

    A user has at most one pending request at a time; the partial unique
    index below backs that rule in the database.
"""

import enum
import uuid

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recipehub.database import Base, TimestampMixin
from recipehub.models.user import User
from recipehub.roles import Role


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


DECISIONS = (RequestStatus.APPROVED, RequestStatus.REJECTED)


class RoleRequest(TimestampMixin, Base):
    __tablename__ = "role_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Snapshot of the requester's roles at submission, e.g. "Reader"
    current_role: Mapped[str] = mapped_column(String(200), nullable=False)
    requested_role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=Role.WRITER.value,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RequestStatus.PENDING.value,
        server_default=text("'pending'"),
    )
    admin_note: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )
    # Requester-facing flag: has the requester seen the decision
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    user: Mapped[User] = relationship(User, lazy="selectin")

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value

    def __repr__(self) -> str:
        return f"<RoleRequest(id={self.id}, user_id={self.user_id}, status='{self.status}')>"


Index(
    "uq_role_requests_pending_user",
    RoleRequest.user_id,
    unique=True,
    postgresql_where=RoleRequest.status == RequestStatus.PENDING.value,
    sqlite_where=RoleRequest.status == RequestStatus.PENDING.value,
)
