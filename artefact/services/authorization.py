"""Workspace role checks.

Each workspace-scoped action names a permission; the policy maps it to the
minimum role, and a member passes when their role ranks at or above it.
"""
from typing import Optional
import enum
import logging
import uuid

from sqlalchemy.orm import Session

from artefact.core import errors
from artefact.models import Role, WorkspaceMember
from artefact.models.workspace import ASSIGNABLE_ROLES

logger = logging.getLogger(__name__)


class Permission(enum.Enum):
    VIEW_CONTENT = "view_content"
    EDIT_CONTENT = "edit_content"
    MANAGE_MEMBERS = "manage_members"
    MANAGE_WORKSPACE = "manage_workspace"


POLICY = {
    Permission.VIEW_CONTENT: Role.VIEWER,
    Permission.EDIT_CONTENT: Role.EDITOR,
    Permission.MANAGE_MEMBERS: Role.ADMIN,
    Permission.MANAGE_WORKSPACE: Role.OWNER,
}


class AuthorizationGate:
    """Resolve a user's membership and enforce the role policy.

    Usage:
        gate = AuthorizationGate(db)
        member = gate.require(user.id, Permission.EDIT_CONTENT, workspace_id)
        # member.workspace_id is the workspace the caller may now write to
    """

    def __init__(self, db: Session):
        self.db = db

    def membership(self, user_id, workspace_id: Optional[uuid.UUID] = None) -> Optional[WorkspaceMember]:
        """Membership in ``workspace_id``, or the user's earliest one when not given."""
        query = self.db.query(WorkspaceMember).filter(WorkspaceMember.user_id == user_id)
        if workspace_id is not None:
            query = query.filter(WorkspaceMember.workspace_id == workspace_id)
        return query.order_by(WorkspaceMember.joined_at.asc()).first()

    def require(self, user_id, permission: Permission, workspace_id: Optional[uuid.UUID] = None) -> WorkspaceMember:
        member = self.membership(user_id, workspace_id)
        if member is None:
            raise errors.NotFound("No workspace found")

        required = POLICY[permission]
        if not member.role.at_least(required):
            logger.warning(
                "User %s (%s) denied %s in workspace %s",
                user_id, member.role.value, permission.value, member.workspace_id,
            )
            raise errors.Forbidden("Insufficient permissions")
        return member

    @staticmethod
    def assignable_role(value: str) -> Role:
        """Parse a role requested for an invite or role change."""
        try:
            role = Role(str(value).upper())
        except ValueError:
            raise errors.ValidationError("Invalid role")
        if role not in ASSIGNABLE_ROLES:
            raise errors.Forbidden("The owner role cannot be assigned")
        return role

    @staticmethod
    def ensure_not_owner(member: WorkspaceMember, message: str) -> None:
        if member.role is Role.OWNER:
            raise errors.Forbidden(message)
