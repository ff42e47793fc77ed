"""Workspace and membership models."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from artefact.db.base import Base


class Role(str, enum.Enum):
    """Membership role, from most to least privileged."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"

    @property
    def rank(self) -> int:
        return _ROLE_RANKS[self]

    def at_least(self, minimum: "Role") -> bool:
        return self.rank >= minimum.rank


_ROLE_RANKS = {
    Role.OWNER: 4,
    Role.ADMIN: 3,
    Role.EDITOR: 2,
    Role.VIEWER: 1,
}

# Roles that may be granted through invitations and role changes
ASSIGNABLE_ROLES = (Role.ADMIN, Role.EDITOR, Role.VIEWER)


class Workspace(Base):
    """Tenant boundary holding categories and URLs."""

    __tablename__ = "workspaces"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    members = relationship("WorkspaceMember", back_populates="workspace", cascade="all, delete-orphan")
    categories = relationship(
        "Category",
        back_populates="workspace",
        cascade="all, delete-orphan",
        order_by="Category.created_at.desc()",
    )
    urls = relationship(
        "Url",
        back_populates="workspace",
        cascade="all, delete-orphan",
        order_by="Url.created_at.desc()",
    )


class WorkspaceMember(Base):
    """Binds a user to a workspace with a role."""

    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("user_id", "workspace_id", name="uq_workspace_member"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workspace_id = Column(Uuid(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(Role, name="workspace_role"), nullable=False, default=Role.VIEWER)
    joined_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="memberships")
    workspace = relationship("Workspace", back_populates="members")
